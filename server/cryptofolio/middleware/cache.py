"""
Client cache hints for read requests.

GET/HEAD responses (auth endpoints excepted) get a short private max-age and
an ETag over the body. A matching If-None-Match turns the response into an
empty 304.
"""
import hashlib
import os

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

CACHE_TTL_SEC = int(os.getenv("CACHE_TTL_SEC", "30"))
CACHEABLE_METHODS = ("GET", "HEAD")
EXCLUDED_PREFIXES = ("/api/login", "/api/register")


def etag_for(body: bytes) -> str:
    return '"' + hashlib.md5(body, usedforsecurity=False).hexdigest() + '"'


class CacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if request.method not in CACHEABLE_METHODS:
            return response
        if request.url.path.startswith(EXCLUDED_PREFIXES):
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
        headers["Cache-Control"] = f"private, max-age={CACHE_TTL_SEC}, must-revalidate"
        headers["X-Cache-TTL"] = str(CACHE_TTL_SEC)

        if body:
            etag = etag_for(body)
            headers["ETag"] = etag
            if request.headers.get("if-none-match") == etag:
                return Response(status_code=304, headers=headers)

        if request.method == "HEAD":
            # same headers and ETag as the GET, without the body
            headers["content-length"] = str(len(body))
            return Response(status_code=response.status_code, headers=headers)

        return Response(
            content=body,
            status_code=response.status_code,
            headers=headers,
        )
