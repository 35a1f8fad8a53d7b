"""Embedding functionality for faqtory."""

from faqtory.embedder.base import Embedder
from faqtory.embedder.client import ClientEmbedder

__all__ = ["Embedder", "ClientEmbedder"]
