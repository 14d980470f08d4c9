"""Image adapters - Frame image reference builders."""

from .url import UrlImageRenderer

__all__ = ["UrlImageRenderer"]
