from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Success:
    elapsed_ms: int


@dataclass(frozen=True)
class Failure:
    detail: str
    error_kind: str
    elapsed_ms: int
    status_code: int | None = None


@dataclass(frozen=True)
class CheckResult:
    sequence_index: int
    description: str
    kind: str
    address: str
    outcome: Success | Failure

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Success)
