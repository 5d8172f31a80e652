"""Route class that escapes HTML in request data before handlers see it"""

from typing import Any, Callable
from urllib.parse import parse_qsl, urlencode

from fastapi import Request, Response
from fastapi.routing import APIRoute

from card_tracker.utils.sanitize import escape_html, sanitize_value

SANITIZED_SCOPE_KEY = "card_tracker.sanitized"


class SanitizedRequest(Request):
    """Request whose parsed JSON body has every string leaf escaped"""

    async def json(self) -> Any:
        if not hasattr(self, "_sanitized_json"):
            self._sanitized_json = sanitize_value(await super().json())
        return self._sanitized_json


def sanitize_scope(scope: dict) -> None:
    """Escape query string values and path parameters in place, once per request"""
    if scope.get(SANITIZED_SCOPE_KEY):
        return

    query_string = scope.get("query_string", b"")
    if query_string:
        pairs = parse_qsl(query_string.decode("latin-1"), keep_blank_values=True)
        scope["query_string"] = urlencode([(key, escape_html(value)) for key, value in pairs]).encode("latin-1")

    if scope.get("path_params"):
        scope["path_params"] = sanitize_value(dict(scope["path_params"]))

    scope[SANITIZED_SCOPE_KEY] = True


class SanitizedRoute(APIRoute):
    """APIRoute that sanitizes body, query and path values before dependencies run"""

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def sanitized_route_handler(request: Request) -> Response:
            sanitize_scope(request.scope)
            return await original_route_handler(SanitizedRequest(request.scope, request.receive))

        return sanitized_route_handler
