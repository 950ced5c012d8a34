"""
Tests for chained runtime environments
"""

from environment import Environment
from objects import TRUE, Integer


class TestEnvironment:

  def test_unbound_name(self):
    assert Environment().get("x") == (None, False)

  def test_set_returns_value(self):
    env = Environment()
    assert env.set("x", Integer(1)) == Integer(1)
    assert env.get("x") == (Integer(1), True)

  def test_lookup_walks_outward(self):
    root = Environment()
    root.set("x", Integer(1))
    inner = Environment.new_enclosed(Environment.new_enclosed(root))
    assert inner.get("x") == (Integer(1), True)
    assert inner.depth() == 3

  def test_set_only_touches_local_scope(self):
    root = Environment()
    root.set("x", Integer(1))
    inner = Environment.new_enclosed(root)
    inner.set("x", TRUE)

    assert inner.get("x") == (TRUE, True)
    assert root.get("x") == (Integer(1), True)

  def test_outer_bindings_made_later_are_visible(self):
    root = Environment()
    inner = Environment.new_enclosed(root)
    root.set("late", Integer(7))
    assert "late" in inner

  def test_iteration_lists_local_names_only(self):
    root = Environment()
    root.set("a", Integer(1))
    inner = Environment.new_enclosed(root)
    inner.set("b", Integer(2))
    assert list(inner) == ["b"]
    assert inner.outer is root
    assert root.outer is None

  def test_repr(self):
    env = Environment()
    env.set("b", Integer(2))
    env.set("a", Integer(1))
    assert repr(env) == "Environment(names=['a', 'b'], depth=1)"
