"""
Package scanning for annotated classes.
"""

import importlib
import inspect
import pkgutil
from typing import Callable, List, Optional


class ClassScanner:
    """Loads the classes defined in a module or package (and its sub-packages)."""

    @staticmethod
    def _modules(package_name: str) -> List:
        package = importlib.import_module(package_name)
        modules = [package]
        if hasattr(package, '__path__'):
            for info in pkgutil.walk_packages(package.__path__, prefix=f"{package.__name__}."):
                modules.append(importlib.import_module(info.name))
        return modules

    @classmethod
    def load_classes(cls, package_name: str, validator: Optional[Callable[[type], bool]] = None) -> List[type]:
        """Return the matching classes, de-duplicated and sorted by qualified name."""
        found = {}
        for module in cls._modules(package_name):
            for _, klass in inspect.getmembers(module, inspect.isclass):
                # only classes defined in the module itself, not re-exports
                if klass.__module__ != module.__name__:
                    continue
                if validator is not None and not validator(klass):
                    continue
                found[f"{klass.__module__}.{klass.__qualname__}"] = klass
        return [found[name] for name in sorted(found)]
