"""Site-specific readers: fetch a URL and hand the text to a renderer."""

import json
from abc import ABC, abstractmethod

import structlog

from src.features.fetch.client import UrlFetcher
from src.features.fetch.models import FetchError
from src.features.readers.filters import parse_document
from src.features.readers.protocols import (
    DocJsonParser,
    MarkdownProcessor,
    OutputSink,
    ReadOptions,
)
from src.features.status.error_mapper import map_fetch_error_to_response
from src.features.status.models import FAILURE_MESSAGE


logger = structlog.get_logger()

APPLE_DEV_PREFIX = "https://developer.apple.com"
STACKOVERFLOW_PREFIX = "https://stackoverflow.com/questions"

# Heading the answers section renders as when a question has no answers
EMPTY_ANSWERS_MARKER = "Your Answer"


class UrlReader(ABC):
    """Base reader: fetch once, then render or report the failure."""

    name: str = "reader"

    def __init__(self, fetcher: UrlFetcher) -> None:
        """Initialize the reader.

        Args:
            fetcher: Fetcher used for the single retrieval.
        """
        self._fetcher = fetcher
        self._log = logger.bind(component="reader", reader=self.name)

    def fetch_url_for(self, url: str) -> str:
        """Get the URL actually fetched for a page URL."""
        return url

    async def read_url(self, url: str, sink: OutputSink, options: ReadOptions) -> None:
        """Fetch ``url`` and send markdown or an error to ``sink``.

        Args:
            url: Page URL requested by the caller.
            sink: Receives exactly one payload or error.
            options: Rendering options.
        """

        def on_success(text: str) -> None:
            sink.send(self.render(url, text, sink, options))

        def on_failure(error: FetchError) -> None:
            response = map_fetch_error_to_response(error)
            self._log.info(
                "read_failed",
                error_class=error.error_class.value,
                status_code=response.status_code,
            )
            sink.send_error(response.status_code, response.message)

        await self._fetcher.fetch_into(self.fetch_url_for(url), on_success, on_failure)

    @abstractmethod
    def render(
        self,
        url: str,
        text: str,
        sink: OutputSink,
        options: ReadOptions,
    ) -> str:
        """Convert fetched text to markdown."""


class HtmlReader(UrlReader):
    """Generic HTML page reader."""

    name = "html"

    def __init__(self, fetcher: UrlFetcher, processor: MarkdownProcessor) -> None:
        super().__init__(fetcher)
        self._processor = processor

    def render(
        self,
        url: str,
        text: str,
        sink: OutputSink,
        options: ReadOptions,
    ) -> str:
        document = parse_document(text)
        return self._processor.process_dom(url, document, sink, "", options)


class StackOverflowReader(UrlReader):
    """StackOverflow question reader: question first, then answers."""

    name = "stackoverflow"

    def __init__(self, fetcher: UrlFetcher, processor: MarkdownProcessor) -> None:
        super().__init__(fetcher)
        self._processor = processor

    def render(
        self,
        url: str,
        text: str,
        sink: OutputSink,
        options: ReadOptions,
    ) -> str:
        document = parse_document(text)
        question = self._processor.process_dom(
            url, document, sink, "question", options
        )
        answers = self._processor.process_dom(
            url,
            document,
            sink,
            "answers",
            options.model_copy(update={"inline_title": False}),
        )
        if answers.startswith(EMPTY_ANSWERS_MARKER):
            return question
        return f"{question}\n\n## Answer\n{answers}"


class AppleDocReader(UrlReader):
    """Apple developer documentation reader backed by the JSON data API."""

    name = "apple"

    def __init__(self, fetcher: UrlFetcher, parser: DocJsonParser) -> None:
        super().__init__(fetcher)
        self._parser = parser

    def fetch_url_for(self, url: str) -> str:
        return self._parser.dev_doc_url(url)

    async def read_url(self, url: str, sink: OutputSink, options: ReadOptions) -> None:
        try:
            await super().read_url(url, sink, options)
        except json.JSONDecodeError as e:
            self._log.warning("doc_json_invalid", error=str(e))
            sink.send_error(502, FAILURE_MESSAGE)

    def render(
        self,
        url: str,
        text: str,
        sink: OutputSink,
        options: ReadOptions,
    ) -> str:
        return self._parser.parse_dev_doc_json(json.loads(text), options)


class ReaderFactory:
    """Chooses the reader for a URL by prefix."""

    def __init__(
        self,
        fetcher: UrlFetcher,
        processor: MarkdownProcessor,
        doc_parser: DocJsonParser,
    ) -> None:
        """Initialize the factory.

        Args:
            fetcher: Shared fetcher for every reader.
            processor: Markdown renderer for HTML pages.
            doc_parser: Apple documentation JSON renderer.
        """
        self._fetcher = fetcher
        self._processor = processor
        self._doc_parser = doc_parser

    def reader_for_url(self, url: str) -> UrlReader:
        """Get the reader responsible for ``url``."""
        if url.startswith(APPLE_DEV_PREFIX):
            return AppleDocReader(self._fetcher, self._doc_parser)
        if url.startswith(STACKOVERFLOW_PREFIX):
            return StackOverflowReader(self._fetcher, self._processor)
        return HtmlReader(self._fetcher, self._processor)


def ignore_post(url: str | None) -> bool:
    """Check whether posted HTML should be ignored in favour of fetching.

    StackOverflow pages are always fetched so both question and answers
    are available.
    """
    return bool(url) and url.startswith(STACKOVERFLOW_PREFIX)
