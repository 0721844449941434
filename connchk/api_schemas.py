from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ErrorKind = Literal["connection", "transport", "status_mismatch", "unexpected"]


class TargetResultRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    index: int = Field(ge=0, description="Position of the target in the configuration")
    description: str
    kind: Literal["tcp", "http"]
    address: str
    ok: bool
    elapsed_ms: int = Field(ge=0)
    message: str = Field(description="Human-readable result line")
    error_kind: ErrorKind | None = None
    status_code: int | None = None
    error: str | None = None


class RunReport(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total: int = Field(ge=0)
    succeeded: int = Field(ge=0)
    failed: int = Field(ge=0)
    results: list[TargetResultRecord]
