from __future__ import annotations

from typing import Any, Iterable

from connchk.api_schemas import RunReport
from connchk.checks.results import CheckResult, Failure


def order_results(results: Iterable[CheckResult]) -> list[CheckResult]:
    return sorted(results, key=lambda r: r.sequence_index)


def format_result(result: CheckResult) -> str:
    outcome = result.outcome
    description = result.description.replace("\n", " ")
    if isinstance(outcome, Failure):
        detail = outcome.detail.replace("\n", " ")
        return f"Failed to connect to {description} with: {detail}"
    return f"Successfully connected to {description} in {outcome.elapsed_ms}ms"


def render_lines(results: Iterable[CheckResult]) -> list[str]:
    return [format_result(r) for r in order_results(results)]


def summarize_results(results: Iterable[CheckResult]) -> tuple[int, int, list[str]]:
    total = 0
    succeeded = 0
    failed: list[str] = []
    for r in order_results(results):
        total += 1
        if r.ok:
            succeeded += 1
        else:
            failed.append(r.description)
    return total, succeeded, failed


def build_report(results: Iterable[CheckResult]) -> dict[str, Any]:
    ordered = order_results(results)
    total, succeeded, _ = summarize_results(ordered)
    records = []
    for r in ordered:
        outcome = r.outcome
        record = {
            "index": r.sequence_index,
            "description": r.description,
            "kind": r.kind,
            "address": r.address,
            "ok": r.ok,
            "elapsed_ms": outcome.elapsed_ms,
            "message": format_result(r),
        }
        if isinstance(outcome, Failure):
            record["error_kind"] = outcome.error_kind
            record["status_code"] = outcome.status_code
            record["error"] = outcome.detail
        records.append(record)

    report = RunReport.model_validate(
        {
            "total": total,
            "succeeded": succeeded,
            "failed": total - succeeded,
            "results": records,
        }
    )
    return report.model_dump()
