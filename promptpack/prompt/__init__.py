"""Prompt document assembly."""

from .assembler import PackRequest, PromptAssembler
from .preamble import generate_preamble
from .tree import render_tree

__all__ = ["PackRequest", "PromptAssembler", "generate_preamble", "render_tree"]
