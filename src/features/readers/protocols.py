"""Collaborators that turn fetched text into markdown.

The rendering and site-specific parsing rules live outside this package;
readers only depend on these protocols.
"""

from typing import Any, Protocol

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict


class ReadOptions(BaseModel):
    """Options forwarded to the markdown processor."""

    model_config = ConfigDict(frozen=True, extra="allow")

    inline_title: bool = True
    ignore_links: bool = False


class OutputSink(Protocol):
    """Destination for a reader's final payload or error."""

    def send(self, text: str) -> None:
        """Deliver the rendered markdown."""
        ...

    def send_error(self, status_code: int, message: str) -> None:
        """Deliver a failure status and message."""
        ...


class MarkdownProcessor(Protocol):
    """Renders a parsed HTML document as markdown."""

    def process_dom(
        self,
        url: str,
        document: BeautifulSoup,
        sink: OutputSink,
        mode: str,
        options: ReadOptions,
    ) -> str:
        """Render the part of ``document`` selected by ``mode``.

        Args:
            url: Source URL, used to resolve relative links.
            document: Parsed document.
            sink: Output sink (processors may send errors directly).
            mode: Empty for the whole page, or a site-specific section id.
            options: Rendering options.

        Returns:
            Markdown text.
        """
        ...


class DocJsonParser(Protocol):
    """Converts Apple developer documentation JSON to markdown."""

    def dev_doc_url(self, url: str) -> str:
        """Map a documentation page URL to its JSON data URL."""
        ...

    def parse_dev_doc_json(self, data: Any, options: ReadOptions) -> str:
        """Render parsed documentation JSON as markdown."""
        ...
