"""ASGI response sending: translates a sluice Response to ASGI messages."""

import logging

from sluice._internal.asgi import Send
from sluice.http.response import Response

logger = logging.getLogger("sluice.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a sluice Response into ASGI send() calls.

    An explicit ``Content-Length`` header is kept as-is (HEAD responses
    carry the length of the body they omit); otherwise it is computed,
    except for statuses that never carry a body.
    """
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    has_length = False
    for name, value in response.headers:
        lowered = name.lower()
        if lowered == "content-type":
            continue
        has_length = has_length or lowered == "content-length"
        raw_headers.append((lowered.encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes if _body_allowed(response.status) else b""

    if not has_length and _body_allowed(response.status):
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    logger.debug("Sending %s (%d bytes)", response.status, len(body))
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
