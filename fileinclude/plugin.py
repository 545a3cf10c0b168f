"""
Host adapter for dev servers and build tools.

The host decides when to call these hooks: on every served or built HTML
document, and whenever a watched file changes.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .config import IncludeOptions
from .logging import get_logger
from .rendering import Pipeline

logger = get_logger(__name__)

FULL_RELOAD: Dict[str, str] = {"type": "full-reload"}


class FileIncludePlugin:
    """Expands directives in documents handed over by a host."""

    name = "file-include"

    def __init__(self, options: Optional[Union[IncludeOptions, Mapping[str, Any]]] = None):
        if options is None:
            options = IncludeOptions()
        elif not isinstance(options, IncludeOptions):
            options = IncludeOptions.from_mapping(options)
        self.options = options
        self.pipeline = Pipeline(options)

    def handles(self, file_id: Union[str, Path]) -> bool:
        """Whether a file has one of the configured extensions."""
        return str(file_id).endswith(tuple(self.options.extensions))

    def transform_index_html(self, html: str) -> str:
        """Expand the entry HTML document against the base directory."""
        return self.pipeline.expand(html)

    def transform(self, code: str, file_id: Union[str, Path]) -> str:
        """
        Expand a module's source if it is a handled document type.

        Args:
            code: Source text
            file_id: Path of the source file

        Returns:
            The expanded text, or ``code`` unchanged for other file types
        """
        if not self.handles(file_id):
            return code
        return self.pipeline.expand(code, source=file_id)

    def handle_hot_update(
        self,
        file: Union[str, Path],
        notify: Optional[Callable[[Dict[str, str]], Any]] = None
    ) -> Optional[Dict[str, str]]:
        """
        React to a changed file.

        Any handled document may be included anywhere, so a change triggers
        a full reload rather than a partial update.

        Args:
            file: Path of the changed file
            notify: Optional callback that delivers the message to clients

        Returns:
            The reload message, or None if the file is not handled
        """
        if not self.handles(file):
            return None
        message = dict(FULL_RELOAD)
        logger.debug("full_reload", file=str(file))
        if notify is not None:
            notify(message)
        return message
