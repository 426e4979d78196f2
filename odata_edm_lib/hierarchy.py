"""
Ancestor lookup table used to resolve base types.
"""

from typing import Callable, Dict, Iterable, Optional, Tuple


class TypeHierarchy:
    """Maps each scanned class to its ancestors, nearest first."""

    def __init__(self, ancestors: Dict[type, Tuple[type, ...]]):
        self._ancestors = ancestors

    @classmethod
    def build(cls, classes: Iterable[type]) -> "TypeHierarchy":
        table = {}
        for klass in classes:
            table[klass] = tuple(base for base in klass.__mro__[1:] if base is not object)
        return cls(table)

    def ancestors(self, klass: type) -> Tuple[type, ...]:
        if klass in self._ancestors:
            return self._ancestors[klass]
        return tuple(base for base in klass.__mro__[1:] if base is not object)

    def resolve_base(self, klass: type, predicate: Callable[[type], bool]) -> Optional[type]:
        """Return the nearest ancestor accepted by predicate, skipping the others."""
        for ancestor in self.ancestors(klass):
            if predicate(ancestor):
                return ancestor
        return None
