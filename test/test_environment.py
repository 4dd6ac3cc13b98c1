"""
Scope chain tests
"""

from environment import (
    env_enclose,
    env_lookup_value,
    env_set_value,
    env_user_bindings,
    make_runtime_env,
)
from values import make_integer, make_string


class TestEnvironment:
    """Test lookup and binding across enclosed scopes"""

    def test_lookup_missing_name(self):
        assert env_lookup_value(make_runtime_env(), "x") is None

    def test_set_returns_value(self):
        env = make_runtime_env()
        value = make_integer(1)
        assert env_set_value(env, "x", value) is value
        assert env_lookup_value(env, "x") is value

    def test_lookup_walks_outward(self):
        outer = make_runtime_env()
        env_set_value(outer, "x", make_integer(1))
        inner = env_enclose(env_enclose(outer))
        assert env_lookup_value(inner, "x") == make_integer(1)

    def test_inner_binding_shadows_outer(self):
        outer = make_runtime_env()
        env_set_value(outer, "x", make_integer(1))
        inner = env_enclose(outer)
        env_set_value(inner, "x", make_integer(2))

        assert env_lookup_value(inner, "x") == make_integer(2)
        assert env_lookup_value(outer, "x") == make_integer(1)

    def test_outer_rebinding_visible_from_inner(self):
        outer = make_runtime_env()
        inner = env_enclose(outer)
        env_set_value(outer, "late", make_string("bound after enclosing"))
        assert env_lookup_value(inner, "late")['value'] == "bound after enclosing"

    def test_initial_bindings_are_copied(self):
        bindings = {"a": make_integer(1)}
        env = make_runtime_env(bindings=bindings)
        env_set_value(env, "b", make_integer(2))
        assert "b" not in bindings

    def test_user_bindings(self):
        outer = make_runtime_env(bindings={"a": make_integer(1), "b": make_integer(2)})
        inner = env_enclose(outer)
        env_set_value(inner, "b", make_integer(3))
        assert env_user_bindings(inner) == {"a": make_integer(1), "b": make_integer(3)}
