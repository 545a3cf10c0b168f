"""
Expression evaluation and {{ expression }} interpolation.

Expressions use Python expression syntax. Every scope key and every custom
function is addressable as a bare name, so a template can say ``{{ title }}``
or ``{{ upper(user.name) }}``.
"""

import json
import math
import re
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import ExpressionEvaluationError
from ..logging import get_logger

logger = get_logger(__name__)


# Builtins reachable from template expressions
SAFE_BUILTINS: Dict[str, Any] = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "dict": dict,
    "enumerate": enumerate,
    "float": float,
    "int": int,
    "len": len,
    "list": list,
    "max": max,
    "min": min,
    "range": range,
    "round": round,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
}

# JSON spellings, so data authors can write ``{{ flag == true }}``
JSON_CONSTANTS: Dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
}


class Record(dict):
    """
    A dict whose keys can also be read as attributes.

    ``user.name`` and ``user["name"]`` are equivalent. Keys win over dict
    methods of the same name, so ``data.items`` reads the ``items`` key when
    there is one. Names starting with an underscore always resolve normally.
    """

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("_") and dict.__contains__(self, name):
            return dict.__getitem__(self, name)
        return super().__getattribute__(name)

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


def wrap_value(value: Any) -> Any:
    """Convert nested mappings to Records so they support attribute access."""
    if isinstance(value, Record):
        return value
    if isinstance(value, Mapping):
        return Record((key, wrap_value(item)) for key, item in value.items())
    if isinstance(value, list):
        return [wrap_value(item) for item in value]
    return value


def unwrap_value(value: Any) -> Any:
    """Turn Records back into plain dicts, for serializers that call ``.items()``."""
    if isinstance(value, Record):
        return {key: unwrap_value(item) for key, item in dict.items(value)}
    if isinstance(value, (list, tuple)):
        return [unwrap_value(item) for item in value]
    return value


def to_text(value: Any) -> str:
    """
    Coerce an expression result to its text representation.

    Booleans render as ``true``/``false``, integral floats drop their
    fraction, lists and dicts render as compact JSON.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(
            unwrap_value(value), separators=(",", ":"), ensure_ascii=False, default=str
        )
    return str(value)


class ExpressionEvaluator:
    """Evaluates free-form expressions against a scope plus custom functions."""

    def __init__(self, functions: Optional[Mapping[str, Callable[..., Any]]] = None):
        # Snapshot, so the functions cannot change during an expansion
        self.functions: Mapping[str, Callable[..., Any]] = MappingProxyType(dict(functions or {}))

    def build_environment(self, scope: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Build the name bindings for one evaluation.

        Layers, lowest precedence first: builtins, JSON constants, custom
        functions, scope. A scope key therefore shadows a function of the
        same name.
        """
        env: Dict[str, Any] = dict(JSON_CONSTANTS)
        env.update(self.functions)
        for key, value in scope.items():
            env[key] = wrap_value(value)
        env["__builtins__"] = SAFE_BUILTINS
        return env

    def evaluate(self, expression: str, scope: Mapping[str, Any]) -> Any:
        """
        Evaluate a single expression.

        Args:
            expression: Expression text (e.g., "title", "price * qty", "len(items) > 0")
            scope: Names visible to the expression

        Returns:
            The expression's value

        Raises:
            ExpressionEvaluationError: On a syntax error, an undefined name, or
                any exception raised while evaluating
        """
        source = expression.strip()
        try:
            code = compile(source, "<expression>", "eval")
        except (SyntaxError, ValueError) as e:
            message = getattr(e, "msg", None) or str(e)
            raise ExpressionEvaluationError(f"Syntax error: {message}", expression) from e
        except (MemoryError, RecursionError) as e:
            # Nesting too deep for the compiler
            raise ExpressionEvaluationError(
                f"Expression too complex: {type(e).__name__}", expression
            ) from e

        env = self.build_environment(scope)
        try:
            return eval(code, env)
        except Exception as e:
            raise ExpressionEvaluationError(
                f"{type(e).__name__}: {e}",
                expression,
                available=[name for name in env if name != "__builtins__"],
            ) from e


class Interpolator:
    """Replaces {{ expression }} markers in text with their values."""

    # Pattern to match {{ expression }}, whitespace inside the braces trimmed
    MARKER_PATTERN = re.compile(r'\{\{\s*(.*?)\s*\}\}')

    def __init__(self, evaluator: ExpressionEvaluator):
        self.evaluator = evaluator

    def interpolate(self, text: str, scope: Mapping[str, Any]) -> str:
        """
        Evaluate every marker in one pass.

        A marker whose expression fails, evaluates to None, or yields a value
        that cannot be rendered as text is left in the output unchanged.
        Substituted text is never scanned again.

        Args:
            text: Template text
            scope: Names visible to the expressions

        Returns:
            Text with markers replaced
        """
        def replace_marker(match: re.Match) -> str:
            expression = match.group(1)
            try:
                value = self.evaluator.evaluate(expression, scope)
            except ExpressionEvaluationError as e:
                logger.warning("expression_failed", expression=expression, error=str(e))
                return match.group(0)
            if value is None:
                return match.group(0)
            try:
                return to_text(value)
            except Exception as e:
                logger.warning(
                    "expression_failed",
                    expression=expression,
                    error=f"{type(e).__name__}: {e}",
                )
                return match.group(0)

        return self.MARKER_PATTERN.sub(replace_marker, text)
