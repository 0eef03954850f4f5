"""HTML output: enhanced-content formatting and preview pages."""

from .formatter import format_enhanced_content
from .renderer import render_preview

__all__ = ["format_enhanced_content", "render_preview"]
