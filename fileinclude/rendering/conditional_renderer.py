"""
Conditional directive resolution.

Handles ``@@if(condition) { body };``. A kept body only has its include
directives resolved; loop and conditional directives inside it are left as
literal text.
"""

from pathlib import Path
from typing import Any, Mapping

from ..template import ConditionEvaluator, DirectiveMatch, DirectiveScanner
from .include_renderer import Chain, IncludeResolver


class ConditionalResolver:
    """Keeps or drops conditional bodies based on their condition."""

    def __init__(
        self,
        scanner: DirectiveScanner,
        conditions: ConditionEvaluator,
        includes: IncludeResolver
    ):
        self.scanner = scanner
        self.conditions = conditions
        self.includes = includes

    def resolve(
        self,
        document: str,
        directory: Path,
        scope: Mapping[str, Any],
        chain: Chain = ()
    ) -> str:
        """
        Replace every conditional directive in a document.

        Args:
            document: Document text
            directory: Directory that includes in kept bodies resolve against
            scope: Ambient scope, used for conditions and kept bodies
            chain: Absolute paths of the documents currently being included

        Returns:
            Document with conditionals resolved
        """
        def replace_conditional(match: DirectiveMatch) -> str:
            if not self.conditions.is_truthy(match.arguments, scope):
                return ""
            return self.includes.resolve((match.body or "").strip(), directory, scope, chain)

        return self.scanner.sub(document, replace_conditional)
