"""parambind.http — HTTP request context.

Provides HttpRequest, a RequestContext built from a method, raw path,
headers and body bytes, with query and form decoding.
"""

from parambind.http._request import HttpRequest

__all__ = [
    "HttpRequest",
]
