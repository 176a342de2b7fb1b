"""Markdown conversion module initialization."""

from .converter import NotionToMarkdown, rich_text_to_markdown

__all__ = ["NotionToMarkdown", "rich_text_to_markdown"]
