"""API-presentation helpers."""

from .responses import STATUS_BY_KIND, to_http_response

__all__ = ["STATUS_BY_KIND", "to_http_response"]
