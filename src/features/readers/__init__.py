"""Readers that fetch a page and render it through external converters.

This module provides:
- ReaderFactory choosing a reader by URL prefix
- HtmlReader, StackOverflowReader and AppleDocReader
- Protocols for the markdown processor, documentation parser and output sink
"""

from src.features.readers.filters import parse_document
from src.features.readers.protocols import (
    DocJsonParser,
    MarkdownProcessor,
    OutputSink,
    ReadOptions,
)
from src.features.readers.readers import (
    APPLE_DEV_PREFIX,
    STACKOVERFLOW_PREFIX,
    AppleDocReader,
    HtmlReader,
    ReaderFactory,
    StackOverflowReader,
    UrlReader,
    ignore_post,
)


__all__ = [
    "APPLE_DEV_PREFIX",
    "STACKOVERFLOW_PREFIX",
    "AppleDocReader",
    "DocJsonParser",
    "HtmlReader",
    "MarkdownProcessor",
    "OutputSink",
    "ReadOptions",
    "ReaderFactory",
    "StackOverflowReader",
    "UrlReader",
    "ignore_post",
    "parse_document",
]
