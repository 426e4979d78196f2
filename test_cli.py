#!/usr/bin/env python3
"""Tests for the odata_edm command line tool."""

import io
import json
import os
import unittest
from unittest.mock import patch

import odata_edm
from odata_edm_lib import EdmConfigurationError


class TestCommandLine(unittest.TestCase):
    """Tests for argument handling and output of main()."""

    def run_main(self, argv, env=None):
        with patch.dict(os.environ, env or {}, clear=True), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout, \
                patch('sys.stderr', new_callable=io.StringIO) as stderr:
            code = odata_edm.main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_json_output(self):
        code, stdout, _ = self.run_main(["edm_fixtures", "--json"])
        self.assertEqual(code, 0)

        data = json.loads(stdout)
        self.assertEqual(data["default_container"], "Container1")
        self.assertEqual(sorted(s["namespace"] for s in data["schemas"]), ["RefScenario", "RefScenario2"])
        photo_schema = next(s for s in data["schemas"] if s["namespace"] == "RefScenario2")
        self.assertTrue(photo_schema["entity_types"][0]["has_stream"])

    def test_trace_output(self):
        code, stdout, _ = self.run_main(["--package", "edm_fixtures"])
        self.assertEqual(code, 0)
        self.assertIn("OData EDM Trace Information", stdout)
        self.assertIn("Default container: Container1", stdout)
        self.assertIn("EntityType Employee : RefScenario.RefBase", stdout)
        self.assertIn("EntityContainer Container1 (default)", stdout)
        self.assertIn("FunctionImport GET EmployeeSearch(q: Edm.String) -> RefScenario.Employee[]", stdout)

    def test_package_from_environment(self):
        code, stdout, _ = self.run_main(["--json"], env={"EDM_SCAN_PACKAGE": "edm_fixtures"})
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(stdout)["default_container"], "Container1")

    def test_flag_overrides_positional(self):
        code, _, _ = self.run_main(["--package", "edm_fixtures", "edm_fixtures_missing", "--json"])
        self.assertEqual(code, 0)

    def test_verbose_from_environment(self):
        code, _, stderr = self.run_main(["edm_fixtures", "--json"], env={"EDM_VERBOSE": "true"})
        self.assertEqual(code, 0)
        self.assertIn("[VERBOSE] Using package from positional argument.", stderr)
        self.assertIn("Provider VERBOSE", stderr)

    def test_missing_package_argument(self):
        code, stdout, stderr = self.run_main([])
        self.assertEqual(code, 1)
        self.assertEqual(stdout, "")
        self.assertIn("ERROR: Package to scan not provided.", stderr)

    def test_unknown_package(self):
        code, _, stderr = self.run_main(["edm_fixtures_missing"])
        self.assertEqual(code, 1)
        self.assertIn("ERROR: Could not import package 'edm_fixtures_missing'", stderr)

    def test_derivation_error(self):
        with patch('odata_edm.AnnotationEdmProvider.from_package',
                   side_effect=EdmConfigurationError("duplicate entity set")):
            code, _, stderr = self.run_main(["edm_fixtures"])
        self.assertEqual(code, 1)
        self.assertIn("ERROR: Model derivation failed: duplicate entity set", stderr)

    def test_trace_and_json_are_exclusive(self):
        with self.assertRaises(SystemExit):
            self.run_main(["edm_fixtures", "--trace", "--json"])


if __name__ == "__main__":
    unittest.main()
