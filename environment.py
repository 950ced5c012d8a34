"""
Monkey runtime environments
Chained scopes mapping names to values. Lookup walks outward from the
innermost scope; writes only ever touch the local scope.
"""

from typing import Dict, Iterator, Optional, Tuple

from objects import MonkeyObject


class Environment:
  """A single scope with an optional, fixed enclosing scope"""

  def __init__(self, outer: Optional["Environment"] = None):
    self.store: Dict[str, MonkeyObject] = {}
    self._outer = outer

  @classmethod
  def new_enclosed(cls, outer: "Environment") -> "Environment":
    """Create a child scope of outer"""
    return cls(outer)

  @property
  def outer(self) -> Optional["Environment"]:
    return self._outer

  def get(self, name: str) -> Tuple[Optional[MonkeyObject], bool]:
    """Look up a name here, then in the enclosing scopes

    Returns (value, found); value is None when the name is unbound.
    """
    if name in self.store:
      return self.store[name], True
    if self._outer is not None:
      return self._outer.get(name)
    return None, False

  def set(self, name: str, value: MonkeyObject) -> MonkeyObject:
    """Bind name in this scope, shadowing any outer binding"""
    self.store[name] = value
    return value

  def depth(self) -> int:
    """Number of scopes from this one out to the root, inclusive"""
    return 1 if self._outer is None else 1 + self._outer.depth()

  def __contains__(self, name: str) -> bool:
    return self.get(name)[1]

  def __iter__(self) -> Iterator[str]:
    return iter(self.store)

  def __repr__(self) -> str:
    return f"Environment(names={sorted(self)!r}, depth={self.depth()})"
