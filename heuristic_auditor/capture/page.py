"""
Captured page model.

The immutable input every pipeline stage reads: URL, HTML, a markdown
text rendition, the screenshot bytes and capture metadata.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from ..exceptions import InvalidInputError
from ..utils.images import ensure_image
from ..utils.paths import validate_url

# Elements rendered as their own markdown line
BLOCK_TAGS = ('h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'p', 'li', 'blockquote', 'td', 'th', 'label', 'button')

# Elements whose text is never shown to users
HIDDEN_TAGS = ('script', 'style', 'noscript', 'template', 'svg', 'head')


def html_to_markdown(html: str) -> str:
    """
    Render the visible text of a page as simple markdown.

    Headings become '#' lines and list items '- ' lines; other blocks
    become plain paragraphs.

    Args:
        html: Page markup

    Returns:
        Markdown text (empty for empty markup)
    """
    if not html or not html.strip():
        return ""
    try:
        soup = BeautifulSoup(html, 'lxml')
    except Exception:
        soup = BeautifulSoup(html, 'html.parser')

    for hidden in soup.find_all(HIDDEN_TAGS):
        hidden.decompose()

    lines: List[str] = []
    for elem in soup.find_all(BLOCK_TAGS):
        if elem.find_parent(BLOCK_TAGS):
            continue
        text = elem.get_text(" ", strip=True)
        if not text:
            continue
        if elem.name[0] == 'h' and elem.name[1:].isdigit():
            lines.append(f"{'#' * int(elem.name[1:])} {text}")
        elif elem.name == 'li':
            lines.append(f"- {text}")
        else:
            lines.append(text)

    if not lines:
        return soup.get_text("\n", strip=True)
    return "\n\n".join(lines)


@dataclass(frozen=True)
class CapturedPage:
    """A captured page, consumed read-only by every stage."""
    url: str
    html: str
    markdown: str = ""
    screenshot: bytes = b""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return self.metadata.get("title", "") if self.metadata else ""

    @classmethod
    def from_payload(
        cls,
        url: str,
        html: str,
        markdown: Optional[str] = None,
        screenshot: Union[bytes, bytearray, str, None] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "CapturedPage":
        """
        Build and validate a page from capture output.

        Args:
            url: Page URL
            html: Page markup
            markdown: Text rendition; derived from the HTML when None
            screenshot: Image bytes, base64 text or data:image URL
            metadata: Capture metadata (title, ...)

        Returns:
            CapturedPage with screenshot decoded to bytes

        Raises:
            InvalidInputError: Bad URL or missing HTML
            InvalidScreenshotError: Unusable screenshot payload
        """
        if not isinstance(html, str) or not html.strip():
            raise InvalidInputError("Captured page has no HTML")
        return cls(
            url=validate_url(url),
            html=html,
            markdown=html_to_markdown(html) if markdown is None else markdown,
            screenshot=ensure_image(screenshot),
            metadata=dict(metadata or {}),
        )

    def validate(self) -> "CapturedPage":
        """
        Check a directly constructed page.

        Returns:
            Validated copy with the URL normalized and the screenshot
            decoded to bytes

        Raises:
            InvalidInputError: Bad URL or missing HTML
            InvalidScreenshotError: Unusable screenshot payload
        """
        return CapturedPage.from_payload(
            self.url, self.html, self.markdown, self.screenshot, self.metadata
        )
