"""Request helpers shared by the transport chain."""

import httpx


async def clone_request(request: httpx.Request) -> httpx.Request:
    """Return a copy of `request` that can be sent again.

    The body is buffered with `aread()`, which is a no-op for requests whose
    content was already read, so the request stream is never consumed twice
    as long as callers buffer it before the first send.
    """
    content = await request.aread()

    # Framing is recomputed for the buffered body.
    headers = request.headers.copy()
    headers.pop("Content-Length", None)
    headers.pop("Transfer-Encoding", None)

    return httpx.Request(
        request.method,
        request.url,
        headers=headers,
        content=content,
        extensions=dict(request.extensions),
    )
