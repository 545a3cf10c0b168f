"""
Document and JSON data loaders.

Documents are read lazily, at the moment their directive is resolved, and
nothing is cached between reads.
"""

import json
from pathlib import Path
from typing import Any, Union

from ..errors import MalformedDataError, MissingResourceError


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not part of JSON
    raise ValueError(f"Invalid JSON constant: {name}")


class DocumentLoader:
    """Reads source documents and JSON data files from disk."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read_document(self, path: Union[str, Path]) -> str:
        """
        Read a document.

        Args:
            path: Resolved path of the document

        Returns:
            The document text

        Raises:
            MissingResourceError: If the file does not exist or cannot be read
        """
        doc_path = Path(path)
        try:
            return doc_path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise MissingResourceError(str(doc_path), type(e).__name__) from e

    @staticmethod
    def parse_json(text: str, source: str = "<inline>") -> Any:
        """
        Parse JSON text with the strict standard parser.

        Args:
            text: JSON text
            source: Where the text came from, for diagnostics

        Raises:
            MalformedDataError: If the text is not valid JSON
        """
        try:
            return json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            raise MalformedDataError(source, text, str(e)) from e

    def load_json(self, path: Union[str, Path]) -> Any:
        """Read a JSON data file and parse it."""
        return self.parse_json(self.read_document(path), source=str(path))
