"""
Unit tests for expression evaluation, interpolation and conditions.
"""

import pytest
from structlog.testing import capture_logs

from fileinclude.errors import ExpressionEvaluationError
from fileinclude.template import (
    ConditionEvaluator,
    ExpressionEvaluator,
    Interpolator,
    Record,
    to_text,
)
from fileinclude.template import engine
from fileinclude.template.engine import unwrap_value, wrap_value


@pytest.fixture
def evaluator():
    return ExpressionEvaluator({"upper": str.upper})


@pytest.fixture
def interpolator(evaluator):
    return Interpolator(evaluator)


class TestExpressionEvaluator:
    """Test expression evaluation against scopes."""

    def test_bare_names(self, evaluator):
        assert evaluator.evaluate("price * qty", {"price": 3, "qty": 4}) == 12

    def test_functions_are_callable(self, evaluator):
        assert evaluator.evaluate("upper(name)", {"name": "ada"}) == "ADA"

    def test_scope_shadows_function(self, evaluator):
        assert evaluator.evaluate("upper", {"upper": "data"}) == "data"

    def test_attribute_access_on_mappings(self, evaluator):
        scope = {"user": {"address": {"city": "Boston"}}}
        assert evaluator.evaluate("user.address.city", scope) == "Boston"
        assert evaluator.evaluate("user['address']['city']", scope) == "Boston"

    def test_json_constants(self, evaluator):
        assert evaluator.evaluate("flag == true", {"flag": True}) is True
        assert evaluator.evaluate("null", {}) is None

    def test_generator_sees_scope(self, evaluator):
        scope = {"items": [{"n": 1}, {"n": 2}]}
        assert evaluator.evaluate("sum(i.n * 2 for i in items)", scope) == 6

    def test_surrounding_whitespace_ignored(self, evaluator):
        assert evaluator.evaluate("  1 + 1 \n", {}) == 2

    def test_syntax_error(self, evaluator):
        with pytest.raises(ExpressionEvaluationError) as excinfo:
            evaluator.evaluate("x +", {"x": 1})
        assert excinfo.value.expression == "x +"

    def test_undefined_name(self, evaluator):
        with pytest.raises(ExpressionEvaluationError) as excinfo:
            evaluator.evaluate("missing", {"present": 1})
        assert "NameError" in str(excinfo.value)
        assert "present" in excinfo.value.available

    def test_runtime_error(self, evaluator):
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("1 / zero", {"zero": 0})

    def test_missing_attribute(self, evaluator):
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("user.email", {"user": {"name": "Ada"}})

    def test_no_import_builtin(self, evaluator):
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("__import__('os')", {})

    def test_functions_are_snapshotted(self):
        functions = {"f": lambda: 1}
        evaluator = ExpressionEvaluator(functions)
        functions["g"] = lambda: 2
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("g()", {})
        with pytest.raises(TypeError):
            evaluator.functions["h"] = lambda: 3

    @pytest.mark.parametrize("error", [MemoryError, RecursionError])
    def test_compiler_exhaustion(self, evaluator, monkeypatch, error):
        def exhausted(*args, **kwargs):
            raise error()

        monkeypatch.setattr(engine, "compile", exhausted, raising=False)
        with pytest.raises(ExpressionEvaluationError) as excinfo:
            evaluator.evaluate("1", {})
        assert error.__name__ in str(excinfo.value)


class TestInterpolator:
    """Test {{ expression }} substitution."""

    def test_multiple_markers(self, interpolator):
        result = interpolator.interpolate("{{first}} {{ last }}", {"first": "John", "last": "Doe"})
        assert result == "John Doe"

    def test_malformed_marker_left_verbatim(self, interpolator):
        with capture_logs() as logs:
            result = interpolator.interpolate("a {{ x + }} b", {"x": 1})
        assert result == "a {{ x + }} b"
        assert logs[0]["event"] == "expression_failed"
        assert logs[0]["expression"] == "x +"

    def test_none_left_verbatim(self, interpolator):
        assert interpolator.interpolate("[{{ value }}]", {"value": None}) == "[{{ value }}]"

    def test_falsy_values_rendered(self, interpolator):
        scope = {"zero": 0, "empty": "", "no": False}
        assert interpolator.interpolate("{{zero}}|{{empty}}|{{no}}", scope) == "0||false"

    def test_substitutions_not_rescanned(self, interpolator):
        scope = {"a": "{{ b }}", "b": "B"}
        assert interpolator.interpolate("{{ a }}", scope) == "{{ b }}"

    def test_markers_do_not_span_lines(self, interpolator):
        text = "{{ a\n + b }}"
        assert interpolator.interpolate(text, {"a": 1, "b": 2}) == text

    @pytest.mark.parametrize("expression", [
        "{(1, 2): 'a'}",
        "unprintable()",
    ])
    def test_unrenderable_value_left_verbatim(self, expression):
        class Unprintable:
            def __str__(self):
                raise RuntimeError("no text")

        interpolator = Interpolator(ExpressionEvaluator({"unprintable": Unprintable}))
        text = "v={{ " + expression + " }}"
        with capture_logs() as logs:
            assert interpolator.interpolate(text, {}) == text
        assert logs[0]["event"] == "expression_failed"

    def test_record_with_method_named_keys(self, interpolator):
        scope = {"data": {"items": [1, 2], "keys": "k"}}
        text = "{{ data.items }}|{{ data.keys }}|{{ data }}"
        assert interpolator.interpolate(text, scope) == '[1,2]|k|{"items":[1,2],"keys":"k"}'


class TestConditionEvaluator:
    """Test condition truthiness."""

    def test_comparisons(self, evaluator):
        conditions = ConditionEvaluator(evaluator)
        assert conditions.is_truthy("1 < 2", {}) is True
        assert conditions.is_truthy("1 > 2", {}) is False

    def test_python_truthiness(self, evaluator):
        conditions = ConditionEvaluator(evaluator)
        assert conditions.is_truthy("items", {"items": []}) is False
        assert conditions.is_truthy("name", {"name": "x"}) is True

    def test_error_is_false(self, evaluator):
        conditions = ConditionEvaluator(evaluator)
        with capture_logs() as logs:
            assert conditions.is_truthy("nope(", {}) is False
        assert logs[0]["event"] == "condition_failed"

    def test_evaluate_condition_raises(self, evaluator):
        conditions = ConditionEvaluator(evaluator)
        with pytest.raises(ExpressionEvaluationError):
            conditions.evaluate_condition("undefined", {})


class TestValues:
    """Test value wrapping and text coercion."""

    @pytest.mark.parametrize("value,expected", [
        (True, "true"),
        (False, "false"),
        (2.0, "2"),
        (1.5, "1.5"),
        (7, "7"),
        ("text", "text"),
        ([1, "a"], '[1,"a"]'),
        ({"a": 1}, '{"a":1}'),
    ])
    def test_to_text(self, value, expected):
        assert to_text(value) == expected

    def test_record_attributes(self):
        record = wrap_value({"a": {"b": [{"c": 1}]}})
        assert isinstance(record, Record)
        assert record.a.b[0].c == 1
        with pytest.raises(AttributeError):
            record.missing

    def test_keys_win_over_dict_methods(self):
        record = wrap_value({"items": ["a"], "get": "value"})
        assert record.items == ["a"]
        assert record.get == "value"
        assert record["items"] == ["a"]
        assert dict(record) == {"items": ["a"], "get": "value"}

    def test_dict_methods_without_shadowing_key(self):
        record = wrap_value({"a": 1})
        assert list(record.items()) == [("a", 1)]
        assert record.get("a") == 1

    def test_unwrap_value(self):
        record = wrap_value({"items": {"keys": 1}, "list": [{"x": 1}]})
        plain = unwrap_value(record)
        assert type(plain) is dict
        assert type(plain["items"]) is dict
        assert type(plain["list"][0]) is dict
        assert plain == {"items": {"keys": 1}, "list": [{"x": 1}]}

    def test_to_text_tuple_keys_raise(self):
        with pytest.raises(TypeError):
            to_text({(1, 2): "a"})
