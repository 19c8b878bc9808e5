"""HTML pre-processing applied before markdown rendering."""

from bs4 import BeautifulSoup


STRIPPED_TAGS = ("style", "script")


def parse_document(html: str) -> BeautifulSoup:
    """Parse HTML and drop style and script blocks.

    Args:
        html: Decoded page text.

    Returns:
        Parsed document without ``<style>`` or ``<script>`` elements.
    """
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(STRIPPED_TAGS):
        tag.decompose()
    return soup
