"""Storage configurations for faqtory."""

from faqtory.configuration.storage.local import LocalStorage

__all__ = ["LocalStorage"]
