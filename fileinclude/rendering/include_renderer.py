"""
Include directive resolution.

Handles ``@@include('path', {"key": value})``: loads the document, merges the
inline data over the current scope, interpolates it, and runs the full
pipeline over the result relative to the included document's directory.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, TYPE_CHECKING

from ..config import DocumentLoader
from ..errors import IncludeCycleError, MalformedDataError, MissingResourceError
from ..logging import get_logger
from ..template import DirectiveMatch, DirectiveScanner, Interpolator

if TYPE_CHECKING:
    from .pipeline import Pipeline

logger = get_logger(__name__)

# 'path' optionally followed by a JSON object, with or without a comma
INCLUDE_ARGUMENTS = re.compile(r'\s*([\'"])(.+?)\1\s*(?:,\s*)?(.*?)\s*$', re.DOTALL)

Chain = Tuple[str, ...]


def resolve_path(directory: Path, file_path: str) -> Path:
    """Resolve a path literal against a directory, without following symlinks."""
    return Path(os.path.abspath(os.path.join(directory, file_path)))


def parse_include_arguments(arguments: str) -> Optional[Tuple[str, str]]:
    """
    Split include arguments into the path literal and the raw data text.

    Returns:
        (path, data_text) with data_text "" when absent, or None if the
        arguments do not start with a quoted path
    """
    match = INCLUDE_ARGUMENTS.match(arguments)
    if not match:
        return None
    return match.group(2), match.group(3)


class IncludeResolver:
    """Resolves include directives, recursing through the whole pipeline."""

    def __init__(
        self,
        scanner: DirectiveScanner,
        loader: DocumentLoader,
        interpolator: Interpolator,
        pipeline: 'Pipeline'
    ):
        self.scanner = scanner
        self.loader = loader
        self.interpolator = interpolator
        self.pipeline = pipeline

    def resolve(
        self,
        document: str,
        directory: Path,
        scope: Mapping[str, Any],
        chain: Chain = ()
    ) -> str:
        """
        Replace every include directive in a document.

        Args:
            document: Document text
            directory: Directory that relative paths resolve against
            scope: Ambient scope
            chain: Absolute paths of the documents currently being included

        Returns:
            Document with includes expanded
        """
        return self.scanner.sub(
            document,
            lambda match: self.include(match, Path(directory), scope, chain)
        )

    def parse_data(self, data_text: str, include_path: Path) -> Dict[str, Any]:
        """
        Parse inline include data, which must be a JSON object.

        Raises:
            MalformedDataError: If the text is not JSON or not an object
        """
        data = self.loader.parse_json(data_text, source=f"include data for {include_path}")
        if not isinstance(data, dict):
            raise MalformedDataError(
                f"include data for {include_path}", data_text, "expected a JSON object"
            )
        return data

    def include(
        self,
        match: DirectiveMatch,
        directory: Path,
        scope: Mapping[str, Any],
        chain: Chain
    ) -> str:
        """Expand a single include directive."""
        parsed = parse_include_arguments(match.arguments)
        if parsed is None:
            logger.debug("include_skipped", directive=match.text)
            return match.text

        file_path, data_text = parsed
        include_path = resolve_path(directory, file_path)

        data: Dict[str, Any] = {}
        if data_text:
            try:
                data = self.parse_data(data_text, include_path)
            except MalformedDataError as e:
                logger.warning("include_data_invalid", path=str(include_path), data=data_text, error=str(e))

        key = str(include_path)
        if key in chain:
            error = IncludeCycleError(key, chain)
            logger.error("include_cycle", path=key, chain=list(chain), error=str(error))
            return ""

        try:
            content = self.loader.read_document(include_path)
        except MissingResourceError as e:
            logger.warning("include_failed", path=key, error=str(e))
            return ""

        child_scope = {**scope, **data}
        content = self.interpolator.interpolate(content, child_scope)
        logger.debug("include_resolved", path=key, depth=len(chain))
        return self.pipeline.process(content, include_path.parent, child_scope, (*chain, key))
