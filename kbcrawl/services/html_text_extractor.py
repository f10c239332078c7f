from typing import Callable, Optional, Protocol

from bs4 import BeautifulSoup


class TextExtractor(Protocol):
    def extract(self, html: str) -> str: ...


# Elements that never carry page content worth indexing.
UNWANTED_TAGS = [
    'script', 'style', 'noscript', 'template',
    'nav', 'header', 'footer', 'aside',
    'form', 'button', 'select', 'input', 'textarea',
    'iframe', 'embed', 'object',
    'svg', 'canvas',
]

UNWANTED_PATTERNS = [
    'nav', 'menu', 'sidebar', 'breadcrumb',
    'advertisement', 'banner', 'popup', 'cookie',
    'social', 'share', 'promo', 'widget',
]


def _remove(elements) -> None:
    for element in elements:
        # nested matches are already destroyed along with their ancestor
        if not element.decomposed:
            element.decompose()


class HtmlTextExtractor:
    """Convert raw HTML into clean text for chunking and embedding.

    Block structure is kept as line breaks; link targets are dropped so only
    anchor text reaches the knowledge base. Parser errors propagate to the
    caller, which records the page as failed.
    """

    def __init__(
        self,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
        strip_boilerplate: bool = True,
    ):
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))
        self.strip_boilerplate = strip_boilerplate

    def extract(self, html: str) -> str:
        if not html:
            return ""

        soup = self._soup_factory(html)

        for tag in UNWANTED_TAGS:
            _remove(soup.find_all(tag))

        if self.strip_boilerplate:
            for pattern in UNWANTED_PATTERNS:
                _remove(soup.find_all(class_=lambda x: x and pattern in x.lower()))
                _remove(soup.find_all(id=lambda x: x and pattern in x.lower()))

        title = soup.title.get_text(strip=True) if soup.title else ""
        if soup.title:
            soup.title.decompose()

        body = soup.body or soup
        text = body.get_text(separator="\n", strip=True)
        if title and not text.startswith(title):
            text = f"{title}\n{text}" if text else title
        return text
