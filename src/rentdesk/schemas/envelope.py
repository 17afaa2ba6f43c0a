"""Response envelope shared by every endpoint.

Learn: Clients always get {code, message, result}. code mirrors the HTTP
status (200, 400, 401, 403, 404, 500) so a client can branch on the body
alone. Success responses are built with Envelope[...]; error responses
are built by the exception handlers in rentdesk.api.errors.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    code: int = 200
    message: str = "success"
    result: Optional[T] = None


def error_body(code: int, message: str) -> dict:
    return {"code": code, "message": message, "result": None}
