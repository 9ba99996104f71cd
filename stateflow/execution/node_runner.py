"""Outbound HTTP call for a single node run.

The runner composes the target URL from the flow's base URL and the node's
request path, sends one request and classifies the answer. It never
retries, and an unreachable target is reported in the result rather than
raised: callers need the structured outcome, not an exception.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import httpx

from stateflow.errors import InvalidConfigError, InvalidInputError
from stateflow.utils.request_fields import RequestFields

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_METHOD = "GET"

# RFC 7230 token
METHOD_TOKEN = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+")


@dataclass
class NodeRunResult:
    """What happened when a node was run."""

    ok: bool
    status_code: int
    body: str
    url: str
    path: str
    method: str
    request_body: str = ""
    error: str | None = None


def compose_url(base_url: str, path: str) -> tuple[str, str]:
    """Join a flow base URL and a node request path.

    Trailing slashes on the base and a missing leading slash on the path are
    both normalized, so "https://h/" + "users" and "https://h" + "/users"
    give the same URL.

    Returns:
        (url, normalized_path)
    """
    base = (base_url or "").strip().rstrip("/")
    path = (path or "").strip()
    if path and not path.startswith("/"):
        path = "/" + path
    return base + path, path


class NodeRunner:
    """Send a node's request to its flow's target service."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            timeout: HTTP request timeout in seconds
            transport: optional httpx transport (tests pass a MockTransport)
        """
        self.timeout = timeout
        self.transport = transport

    def run(self, base_url: str, fields: RequestFields) -> NodeRunResult:
        """Issue the node's request once and classify the response.

        Raises:
            InvalidConfigError: the flow has no base URL; nothing is sent.
            InvalidInputError: the method is not a valid token, or httpx cannot
                build a request from the URL.
        """
        url, path = compose_url(base_url, fields.request_path)
        if not (base_url or "").strip().rstrip("/"):
            raise InvalidConfigError("configure the flow's base URL before running nodes")

        method = (fields.request_method or "").strip().upper() or DEFAULT_METHOD
        if not METHOD_TOKEN.fullmatch(method):
            raise InvalidInputError(f"failed to build request: invalid method {method!r}")

        content = None
        headers = {}
        if method != DEFAULT_METHOD and fields.request_data:
            content = fields.request_data
            headers["Content-Type"] = "application/json"

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                request = client.build_request(method, url, content=content, headers=headers)
                response = client.send(request)
        except httpx.InvalidURL as exc:
            raise InvalidInputError(f"failed to build request: {exc}") from exc
        except httpx.RequestError as exc:
            logger.warning("node request %s %s failed: %s", method, url, exc)
            return NodeRunResult(
                ok=False,
                status_code=0,
                body="",
                url=url,
                path=path,
                method=method,
                request_body=fields.request_data,
                error=f"request failed: {exc}",
            )

        logger.info("node request %s %s -> %s", method, url, response.status_code)
        return NodeRunResult(
            ok=200 <= response.status_code < 300,
            status_code=response.status_code,
            body=response.text,
            url=url,
            path=path,
            method=method,
            request_body=fields.request_data,
        )
