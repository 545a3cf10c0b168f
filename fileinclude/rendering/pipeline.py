"""
Expansion pipeline.

Runs include resolution, then loop expansion, then conditional resolution,
once, over a document.
"""

from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from ..config import DocumentLoader, IncludeOptions
from ..logging import get_logger
from ..template import (
    ConditionEvaluator,
    DirectiveScanner,
    ExpressionEvaluator,
    Interpolator,
)
from .conditional_renderer import ConditionalResolver
from .include_renderer import Chain, IncludeResolver, resolve_path
from .loop_renderer import LoopExpander

logger = get_logger(__name__)


class Pipeline:
    """
    Wires the resolvers for one set of options.

    Custom functions are captured when the pipeline is built, so they stay
    fixed for every expansion the pipeline runs.
    """

    def __init__(self, options: Optional[IncludeOptions] = None):
        self.options = options or IncludeOptions()
        self.loader = DocumentLoader(self.options.encoding)
        self.evaluator = ExpressionEvaluator(self.options.custom_functions)
        self.interpolator = Interpolator(self.evaluator)
        self.condition_evaluator = ConditionEvaluator(self.evaluator)

        # Include and loop passes never look inside conditionals
        if_scanner = DirectiveScanner(self.options.if_pattern, conditional=True)
        include_scanner = DirectiveScanner(self.options.include_pattern, opaque=if_scanner)
        loop_scanner = DirectiveScanner(self.options.loop_pattern, opaque=if_scanner)

        self.includes = IncludeResolver(include_scanner, self.loader, self.interpolator, self)
        self.loops = LoopExpander(loop_scanner, self.loader, self.interpolator)
        self.conditionals = ConditionalResolver(if_scanner, self.condition_evaluator, self.includes)

    def process(
        self,
        document: str,
        directory: Union[str, Path],
        scope: Mapping[str, Any],
        chain: Chain = ()
    ) -> str:
        """
        Expand a document once: includes, then loops, then conditionals.

        Args:
            document: Document text
            directory: Directory that relative paths resolve against
            scope: Ambient scope
            chain: Absolute paths of the documents currently being included

        Returns:
            The expanded document
        """
        directory = Path(directory)
        content = self.includes.resolve(document, directory, scope, chain)
        content = self.loops.expand(content, directory)
        content = self.conditionals.resolve(content, directory, scope, chain)
        return content

    def expand(
        self,
        document: str,
        base_dir: Optional[Union[str, Path]] = None,
        scope: Optional[Mapping[str, Any]] = None,
        source: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Expand a root document.

        Args:
            document: Root document text (not itself interpolated)
            base_dir: Directory for relative paths, defaults to options.base_dir
            scope: Initial scope, defaults to options.context
            source: Path the document was read from, if any; including it
                again from within is reported as a cycle

        Returns:
            The expanded document
        """
        directory = Path(base_dir) if base_dir is not None else self.options.base_dir
        ambient = dict(self.options.context if scope is None else scope)
        chain: Chain = (str(resolve_path(directory, str(source))),) if source else ()
        logger.debug("expand_started", base_dir=str(directory), source=str(source) if source else None)
        return self.process(document, directory, ambient, chain)


def expand(
    document: str,
    base_dir: Optional[Union[str, Path]] = None,
    scope: Optional[Mapping[str, Any]] = None,
    functions: Optional[Mapping[str, Callable[..., Any]]] = None,
    *,
    options: Optional[IncludeOptions] = None
) -> str:
    """
    Expand include, loop and conditional directives in a document.

    Never raises for missing files, malformed JSON or failing expressions:
    those are logged and degrade to empty text, empty data, unchanged
    markers and false conditions respectively.

    Args:
        document: Root document text
        base_dir: Directory for relative paths (default: options.base_dir,
            i.e. the current working directory)
        scope: Initial scope (default: options.context)
        functions: Custom functions callable from expressions; replaces
            options.custom_functions when given
        options: Marker tokens and other settings

    Returns:
        The expanded document

    Example:
        >>> expand("<body>@@include('nav.html')</body>", "site/")  # doctest: +SKIP
    """
    options = options or IncludeOptions()
    if functions is not None:
        options = replace(options, custom_functions=dict(functions))
    return Pipeline(options).expand(document, base_dir, scope)
