"""JSON problem payloads shared by the Flask blueprints and error handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from flask import jsonify


@dataclass(frozen=True)
class ProblemResponse:
    """RFC 7807-flavoured error body: a machine code, status and message."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error, "status": self.status}
        if self.message:
            payload["message"] = self.message
        payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        """Convert the problem into a Flask ``(body, status)`` tuple."""

        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse`; keyword extras land in the body."""

    return ProblemResponse(error=error, status=status, message=message, extra=dict(extra))


def not_found(message: str, **extra: Any) -> ProblemResponse:
    return problem_response("not_found", status=404, message=message, **extra)


__all__ = ["ProblemResponse", "not_found", "problem_response"]
