"""
Reference scenario model used by the tests and the CLI examples.
"""

NAMESPACE_1 = "RefScenario"
NAMESPACE_2 = "RefScenario2"
