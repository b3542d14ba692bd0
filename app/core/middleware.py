from typing import Iterable, List, Tuple

DEFAULT_SECURITY_HEADERS: Tuple[Tuple[bytes, bytes], ...] = (
    (b"X-Content-Type-Options", b"nosniff"),
    (b"X-Frame-Options", b"DENY"),
    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
)


def security_headers(production: bool) -> List[Tuple[bytes, bytes]]:
    headers = list(DEFAULT_SECURITY_HEADERS)
    if production:
        headers.append((b"Strict-Transport-Security", b"max-age=31536000; includeSubDomains"))
    return headers


class SecurityHeadersMiddleware:
    """Pure ASGI middleware appending fixed security headers to every HTTP response."""

    def __init__(self, app, headers: Iterable[Tuple[bytes, bytes]] = DEFAULT_SECURITY_HEADERS):
        self.app = app
        self.headers = list(headers)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend(self.headers)
            await send(message)

        await self.app(scope, receive, send_wrapper)
