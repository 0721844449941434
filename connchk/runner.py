from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from pydantic import ValidationError

from connchk.checks.http_check import run_http
from connchk.checks.results import CheckResult, Failure, Success
from connchk.checks.tcp_check import run_tcp
from connchk.config import settings
from connchk.errors import ConfigurationError, ProbeError
from connchk.models import Target, TargetKind

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def ensure_targets(targets: Sequence[Target | Mapping[str, Any]]) -> list[Target]:
    """Validate every entry before any probe runs; raw mappings are parsed here."""
    out: list[Target] = []
    for index, item in enumerate(targets):
        if isinstance(item, Target):
            out.append(item)
            continue
        try:
            out.append(Target.model_validate(item))
        except ValidationError as exc:
            raise ConfigurationError(f"target #{index + 1}: {exc}") from exc
    return out


def probe_target(
    index: int,
    target: Target,
    tcp_timeout_s: float,
    http_timeout_s: float,
    http_connect_timeout_s: float | None = None,
) -> CheckResult:
    start = time.perf_counter()
    try:
        if target.kind is TargetKind.TCP:
            run_tcp(target.address, timeout_s=tcp_timeout_s)
        elif target.kind is TargetKind.HTTP:
            run_http(
                target.address,
                target.custom,
                timeout_s=http_timeout_s,
                connect_timeout_s=http_connect_timeout_s,
            )
        else:
            raise ProbeError(f"unsupported target kind: {target.kind}")
        outcome: Success | Failure = Success(elapsed_ms=_elapsed_ms(start))
    except ProbeError as e:
        outcome = Failure(
            detail=str(e),
            error_kind=e.error_kind,
            elapsed_ms=_elapsed_ms(start),
            status_code=e.status_code,
        )
    except Exception as e:
        # A broken probe must not take down the rest of the run.
        logger.exception("Probe for %r raised unexpectedly", target.description)
        outcome = Failure(
            detail=f"{e.__class__.__name__}: {e}",
            error_kind="unexpected",
            elapsed_ms=_elapsed_ms(start),
        )

    return CheckResult(
        sequence_index=index,
        description=target.description,
        kind=target.kind.value,
        address=target.address,
        outcome=outcome,
    )


def run_checks(
    targets: Sequence[Target | Mapping[str, Any]],
    *,
    tcp_timeout_s: float | None = None,
    http_timeout_s: float | None = None,
    http_connect_timeout_s: float | None = None,
) -> list[CheckResult]:
    """
    Probe every target concurrently and return one result per target,
    ordered as the targets were given.

    Raises ConfigurationError, before any network activity, if a descriptor
    is malformed. Probe failures never raise; they come back as Failure
    outcomes.
    """
    checked = ensure_targets(targets)
    if not checked:
        return []

    tcp_timeout = settings.TCP_TIMEOUT_SECONDS if tcp_timeout_s is None else tcp_timeout_s
    http_timeout = (
        settings.HTTP_TIMEOUT_SECONDS if http_timeout_s is None else http_timeout_s
    )
    if http_connect_timeout_s is None:
        # An explicit read timeout also bounds connect unless told otherwise.
        http_connect_timeout_s = (
            settings.HTTP_CONNECT_TIMEOUT_SECONDS if http_timeout_s is None else http_timeout
        )
    for name, value in (
        ("tcp timeout", tcp_timeout),
        ("http timeout", http_timeout),
        ("http connect timeout", http_connect_timeout_s),
    ):
        if value <= 0:
            raise ConfigurationError(f"{name} must be greater than 0, got {value}")

    results: list[CheckResult] = []
    start = time.perf_counter()
    # One worker per target: every probe is in flight at once.
    with ThreadPoolExecutor(
        max_workers=len(checked), thread_name_prefix="connchk"
    ) as pool:
        futures = {}
        for index, target in enumerate(checked):
            logger.debug("Dispatching %s probe #%d to %s", target.kind.value, index, target.address)
            fut = pool.submit(
                probe_target,
                index,
                target,
                tcp_timeout,
                http_timeout,
                http_connect_timeout_s,
            )
            futures[fut] = (index, target)

        for fut in as_completed(futures):
            index, target = futures[fut]
            try:
                res = fut.result()
            except Exception as e:
                res = CheckResult(
                    sequence_index=index,
                    description=target.description,
                    kind=target.kind.value,
                    address=target.address,
                    outcome=Failure(
                        detail=f"{e.__class__.__name__}: {e}",
                        error_kind="unexpected",
                        elapsed_ms=0,
                    ),
                )
            if not res.ok:
                logger.warning("Check failed for %r: %s", res.description, res.outcome.detail)
            results.append(res)

    results.sort(key=lambda r: r.sequence_index)
    failed = sum(1 for r in results if not r.ok)
    logger.info(
        "Checked %d targets in %dms: %d ok, %d failed",
        len(results),
        _elapsed_ms(start),
        len(results) - failed,
        failed,
    )
    return results
