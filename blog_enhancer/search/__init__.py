"""Reference discovery through web search."""

from .references import ReferenceFinder, filter_results, generate_synthetic

__all__ = ["ReferenceFinder", "filter_results", "generate_synthetic"]
