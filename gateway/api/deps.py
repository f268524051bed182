import json
import logging
from contextlib import contextmanager

from fastapi import Request

from gateway.core.errors import GatewayError
from gateway.core.redaction import redact_payload
from gateway.services.container import Services


log = logging.getLogger(__name__)


def get_services(request: Request) -> Services:
    return request.app.state.services


async def log_request(request: Request) -> None:
    body = await request.body()
    if not body:
        log.info("request %s %s", request.method, request.url.path)
        return
    try:
        payload = redact_payload(json.loads(body))
    except ValueError:
        payload = f"<{len(body)} bytes>"
    log.info("request %s %s %s", request.method, request.url.path, payload)


@contextmanager
def failures_as_500():
    """Read endpoints report every failure as 500, keeping the error code."""
    try:
        yield
    except GatewayError as e:
        e.status_code = 500
        raise
