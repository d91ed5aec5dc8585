from fastapi import Query, Request

from .schemas import ProbeRequest


def get_source_ip(request: Request) -> str | None:
    xff = request.headers.get("X-Forwarded-For")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else None


def get_probe_request(
    request: Request,
    t: str | None = Query(None, description="probe access token"),
) -> ProbeRequest:
    # 把 HTTP request 轉成不可變的 ProbeRequest，prober 本身不碰 Starlette 物件
    return ProbeRequest(path=request.url.path, token=t, source_ip=get_source_ip(request))
