"""
URL image renderer - Implements ImageRenderer protocol.

Produces an image reference pointing at an external image service; the
pixels themselves are rendered elsewhere.
"""

from urllib.parse import urlencode


class UrlImageRenderer:
    """
    Implements ImageRenderer protocol by building a query-string URL.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, base_url: str, path: str = "/frame-image") -> None:
        self._endpoint = f"{base_url.rstrip('/')}{path}"

    def render(self, title: str, subtitle: str) -> str:
        return f"{self._endpoint}?{urlencode({'title': title, 'subtitle': subtitle})}"
