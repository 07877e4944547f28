from .blocks import prepare_block, prepare_sections  # noqa: F401
from .rich_text import render_rich_text  # noqa: F401

__all__ = ["render_rich_text", "prepare_block", "prepare_sections"]
