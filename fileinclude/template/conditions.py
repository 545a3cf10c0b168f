"""
Condition evaluation for conditional directives.

A condition is any expression; its truthiness decides whether the
directive's body is kept.
"""

from typing import Any, Mapping

from ..errors import ExpressionEvaluationError
from ..logging import get_logger
from .engine import ExpressionEvaluator

logger = get_logger(__name__)


class ConditionEvaluator:
    """Evaluates conditional expressions for template logic."""

    def __init__(self, evaluator: ExpressionEvaluator):
        self.evaluator = evaluator

    def evaluate_condition(self, condition: str, scope: Mapping[str, Any]) -> bool:
        """
        Evaluate a condition to a boolean.

        Uses Python truthiness: empty strings, empty lists, 0 and None are false.

        Raises:
            ExpressionEvaluationError: If the condition cannot be evaluated
        """
        value = self.evaluator.evaluate(condition, scope)
        try:
            return bool(value)
        except Exception as e:
            raise ExpressionEvaluationError(
                f"Cannot convert result to bool: {type(e).__name__}: {e}", condition
            ) from e

    def is_truthy(self, condition: str, scope: Mapping[str, Any]) -> bool:
        """Like evaluate_condition, but a failing condition counts as false."""
        try:
            return self.evaluate_condition(condition, scope)
        except ExpressionEvaluationError as e:
            logger.warning("condition_failed", condition=condition.strip(), error=str(e))
            return False
