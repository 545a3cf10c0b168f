"""
Expansion options.

Holds the directive marker tokens, the root directory, the initial scope and
the custom functions shared by every component of one pipeline.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Tuple


# Keys accepted by from_mapping in addition to the field names
_CAMEL_CASE_KEYS = {
    "includePattern": "include_pattern",
    "loopPattern": "loop_pattern",
    "ifPattern": "if_pattern",
    "baseDir": "base_dir",
    "customFunctions": "custom_functions",
}


@dataclass
class IncludeOptions:
    """Recognized options, all optional."""

    include_pattern: str = "@@include"
    loop_pattern: str = "@@loop"
    if_pattern: str = "@@if"
    base_dir: Path = field(default_factory=Path.cwd)
    context: Dict[str, Any] = field(default_factory=dict)
    custom_functions: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    encoding: str = "utf-8"
    extensions: Tuple[str, ...] = (".html",)

    def __post_init__(self):
        self.base_dir = Path(self.base_dir)
        for name in ("include_pattern", "loop_pattern", "if_pattern"):
            if not getattr(self, name):
                raise ValueError(f"{name} must be a non-empty string")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "IncludeOptions":
        """
        Build options from a plain mapping.

        Accepts the field names as well as their camelCase spellings
        (``includePattern``, ``baseDir``, ``customFunctions``...).

        Raises:
            TypeError: If a key is not a recognized option
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                raise TypeError(f"Unknown option: {key}")
            kwargs[name] = value
        if "extensions" in kwargs:
            kwargs["extensions"] = tuple(kwargs["extensions"])
        return cls(**kwargs)
