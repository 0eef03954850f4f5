"""
Blog Enhancer - scrape blog articles and produce AI-enhanced rewrites.

Extracts article content from arbitrary blog pages, discovers related
references through web search, rewrites the article with an LLM grounded
in those references, and formats the result as styled HTML.
"""

__version__ = "0.1.0"
