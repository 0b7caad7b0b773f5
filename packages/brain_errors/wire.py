"""JSON-RPC 2.0 error objects for MCP tool responses."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict

from . import codes
from .chain import as_error
from .error import AnnotatedError


class WireError(BaseModel):
    """JSON-RPC 2.0 error object: ``{"code", "message", "data"}``.

    ``data`` holds the serialized annotated error and is omitted from the
    wire shape when absent.
    """

    model_config = ConfigDict(frozen=True)

    code: int = 0
    message: str = ""
    data: bytes | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire shape with ``data`` embedded as JSON."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data:
            payload["data"] = json.loads(self.data)
        return payload

    def to_json(self) -> str:
        """Return the compact JSON wire representation."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    def __str__(self) -> str:
        """Return ``"MCP error <code>: <message>"``."""
        return f"MCP error {self.code}: {self.message}"


def to_wire_error(error: BaseException | None) -> WireError:
    """Project any error onto the JSON-RPC 2.0 error shape.

    ``None`` gives the zero object. Foreign errors map to internal error with
    their text and no data. Annotated errors use their MCP code (internal
    error when unset), their primary message and their full JSON as data.
    """
    if error is None:
        return WireError()

    annotated = as_error(error, AnnotatedError)
    if annotated is None:
        return WireError(code=codes.MCP_INTERNAL_ERROR, message=str(error))

    return WireError(
        code=annotated.details.mcp_code or codes.MCP_INTERNAL_ERROR,
        message=annotated.message,
        data=annotated.to_json().encode("utf-8"),
    )
