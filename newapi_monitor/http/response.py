"""Query result wrapper.

A QueryResult is either the verbatim body of a successful response or a
classified failure carrying the error that describes it. The body is never
parsed here.
"""

import re
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional

from ..errors import BodyReadError, GatewayError, HttpStatusError, TransportError


_CHARSET_RE = re.compile(r"charset\s*=\s*\"?([\w.:-]+)\"?", re.IGNORECASE)


class ResultKind(Enum):
    """Outcome classes of a gateway request."""
    OK = "ok"
    TRANSPORT_ERROR = "transport_error"
    HTTP_STATUS_ERROR = "http_status_error"
    BODY_READ_ERROR = "body_read_error"


@dataclass
class QueryResult:
    """Outcome of a single gateway GET."""
    url: str
    kind: ResultKind
    body: Optional[str] = None
    status_code: Optional[int] = None
    reason: Optional[str] = None
    error: Optional[GatewayError] = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.OK

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def unwrap(self) -> str:
        """Return the body, or raise the error this result carries."""
        if self.ok:
            return self.body or ""
        raise self.error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "kind": self.kind.value,
            "status_code": self.status_code,
            "reason": self.reason,
            "body": self.body,
            "error": self.error_message,
            "elapsed_ms": self.elapsed_ms,
        }

    def __repr__(self) -> str:
        return f"<QueryResult [{self.kind.value} {self.status_code}] {self.url}>"


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def reason_phrase(status_code: int, reason: Optional[str] = None) -> str:
    """Server reason phrase, or the standard one when none was sent (HTTP/2)."""
    if reason:
        return reason
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def charset_from_headers(headers: Optional[Mapping[str, str]], default: str = "utf-8") -> str:
    """Extract the body charset from a Content-Type header."""
    if not headers:
        return default

    content_type = None
    for name, value in headers.items():
        if name.lower() == "content-type":
            content_type = value
            break

    if content_type:
        match = _CHARSET_RE.search(content_type)
        if match:
            return match.group(1)
    return default


def decode_body(content: bytes, charset: str) -> str:
    """Decode body bytes, replacing undecodable sequences."""
    try:
        return content.decode(charset, errors="replace")
    except LookupError:
        return content.decode("utf-8", errors="replace")


# Result constructors
def success_result(url: str, status_code: int, reason: Optional[str],
                   body: str, elapsed_ms: int = 0) -> QueryResult:
    return QueryResult(
        url=url,
        kind=ResultKind.OK,
        body=body,
        status_code=status_code,
        reason=reason_phrase(status_code, reason),
        elapsed_ms=elapsed_ms,
    )


def http_status_result(url: str, status_code: int, reason: Optional[str],
                       body: str, elapsed_ms: int = 0) -> QueryResult:
    phrase = reason_phrase(status_code, reason)
    return QueryResult(
        url=url,
        kind=ResultKind.HTTP_STATUS_ERROR,
        body=body,
        status_code=status_code,
        reason=phrase,
        error=HttpStatusError(status_code, phrase, body),
        elapsed_ms=elapsed_ms,
    )


def transport_error_result(url: str, detail: str, elapsed_ms: int = 0) -> QueryResult:
    return QueryResult(
        url=url,
        kind=ResultKind.TRANSPORT_ERROR,
        error=TransportError(detail),
        elapsed_ms=elapsed_ms,
    )


def body_read_error_result(url: str, status_code: int, reason: Optional[str],
                           detail: str, elapsed_ms: int = 0) -> QueryResult:
    return QueryResult(
        url=url,
        kind=ResultKind.BODY_READ_ERROR,
        status_code=status_code,
        reason=reason_phrase(status_code, reason),
        error=BodyReadError(detail, status_code),
        elapsed_ms=elapsed_ms,
    )
