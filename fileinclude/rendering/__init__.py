"""Directive resolvers and the pipeline that runs them."""

from .include_renderer import IncludeResolver
from .loop_renderer import LoopExpander
from .conditional_renderer import ConditionalResolver
from .pipeline import Pipeline, expand

__all__ = ["IncludeResolver", "LoopExpander", "ConditionalResolver", "Pipeline", "expand"]
