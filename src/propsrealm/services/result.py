"""ServiceResult — what every service method returns.

INVARIANT: Realm exceptions stop at the service layer. Callers (the CLI or
an embedding host) branch on ``ok`` and ``error.code`` only.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why an operation failed.

    Codes: ``LOAD_FAILED``, ``NO_REALM``, ``REALM_UNAVAILABLE``,
    ``CREDENTIAL_CORRUPT``, ``CREDENTIAL_UNAVAILABLE``.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: False exactly when ``error`` is set.
        op: Operation name, e.g. ``"identity_verify"``; selects the renderer.
        data: Operation payload.
        warnings: Non-fatal notes, printed to stderr by the CLI.
        error: Failure details.
        meta: Extra information such as telemetry spans.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
