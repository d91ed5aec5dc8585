from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..auth import get_probe_request
from ..config import Settings, get_settings
from ..prober import DEFAULT_CHECKS, ReadinessChecks, probe_liveness, probe_readiness
from ..schemas import ProbeRequest, ProbeResult

router = APIRouter()

NO_CACHE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate, max-age=0"}
UNREADY_STATUS = 503


def get_readiness_checks() -> ReadinessChecks:
    return DEFAULT_CHECKS


def probe_response(result: ProbeResult) -> PlainTextResponse:
    return PlainTextResponse(
        result.body(),
        status_code=200 if result.healthy else UNREADY_STATUS,
        headers=NO_CACHE_HEADERS,
    )


@router.get("/healthz", response_class=PlainTextResponse)
def healthz(
    probe: ProbeRequest = Depends(get_probe_request),
    settings: Settings = Depends(get_settings),
):
    # 不碰 DB，只確認 process 還能回 HTTP
    return probe_response(probe_liveness(settings, probe))


@router.get("/readyz", response_class=PlainTextResponse)
async def readyz(
    probe: ProbeRequest = Depends(get_probe_request),
    settings: Settings = Depends(get_settings),
    checks: ReadinessChecks = Depends(get_readiness_checks),
):
    result = await probe_readiness(settings, probe, checks)
    return probe_response(result)
