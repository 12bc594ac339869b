"""Cache implementations."""

from .hybrid import HybridCache

__all__ = ["HybridCache"]
