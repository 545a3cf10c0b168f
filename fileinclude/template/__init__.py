"""Expression evaluation, interpolation and directive scanning."""

from .engine import ExpressionEvaluator, Interpolator, Record, to_text
from .conditions import ConditionEvaluator
from .functions import default_functions
from .scanner import DirectiveMatch, DirectiveScanner

__all__ = [
    "ExpressionEvaluator",
    "Interpolator",
    "Record",
    "to_text",
    "ConditionEvaluator",
    "default_functions",
    "DirectiveMatch",
    "DirectiveScanner",
]
