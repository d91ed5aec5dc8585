import asyncio
import hmac
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from .checks import (
    TAG_CACHE,
    TAG_DB,
    TAG_MAINTENANCE,
    check_cache,
    check_database,
    check_maintenance,
    describe_error,
)
from .config import Settings
from .exceptions import AccessDenied, DependencyUnavailable
from .schemas import ProbeRequest, ProbeResult


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadinessChecks:
    database: Callable[[Settings], None] = check_database
    cache: Callable[[Settings], Awaitable[None]] = check_cache
    maintenance: Callable[[Settings], None] = check_maintenance


DEFAULT_CHECKS = ReadinessChecks()


def token_matches(settings: Settings, request: ProbeRequest) -> bool:
    if not settings.token_required:
        return True
    supplied = request.token or ""
    return hmac.compare_digest(supplied.encode("utf-8"), settings.token.encode("utf-8"))


def authorize(settings: Settings, request: ProbeRequest) -> None:
    if not token_matches(settings, request):
        logger.info(
            "probe token mismatch",
            extra={"path": request.path, "source_ip": request.source_ip},
        )
        raise AccessDenied(request.path)


def probe_liveness(settings: Settings, request: ProbeRequest) -> ProbeResult:
    authorize(settings, request)
    return ProbeResult()


def _record_failure(check: str, tag: str, detail: str) -> str:
    logger.warning(
        "readiness check failed",
        extra={"check": check, "tag": tag, "detail": detail},
    )
    return tag


async def _run_bounded(check: str, default_tag: str, awaitable: Awaitable[None], timeout: float) -> str | None:
    # 任何例外都轉成 tag，不往外丟
    try:
        await asyncio.wait_for(awaitable, timeout)
    except DependencyUnavailable as e:
        return _record_failure(check, e.tag, e.detail)
    except asyncio.TimeoutError:
        return _record_failure(check, default_tag, f"no answer within {timeout}s")
    except Exception as e:
        return _record_failure(check, default_tag, describe_error(e))
    return None


async def probe_readiness(
    settings: Settings,
    request: ProbeRequest,
    checks: ReadinessChecks | None = None,
) -> ProbeResult:
    """
    Readiness probe。

    1. token 不符 -> AccessDenied，後面的檢查都不跑
    2. DB (worker thread) 與 cache 同時跑，共用同一個 deadline
    3. maintenance marker
    """
    authorize(settings, request)
    checks = checks or DEFAULT_CHECKS

    db_tag, cache_tag = await asyncio.gather(
        _run_bounded(
            "database",
            TAG_DB,
            asyncio.to_thread(checks.database, settings),
            settings.deadline,
        ),
        _run_bounded("cache", TAG_CACHE, checks.cache(settings), settings.deadline),
    )
    failures = [tag for tag in (db_tag, cache_tag) if tag]

    try:
        checks.maintenance(settings)
    except DependencyUnavailable as e:
        failures.append(_record_failure("maintenance", e.tag, e.detail))
    except Exception as e:
        failures.append(_record_failure("maintenance", TAG_MAINTENANCE, describe_error(e)))

    return ProbeResult(failures=failures)
