from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse


# Orchestrator 直接打 pod IP (http)，probe 不做 redirect
EXEMPT_PATHS = frozenset({"/healthz", "/readyz"})


def canonical_target(
    *,
    primary_domain: str | None,
    host: str,
    scheme: str,
    forwarded_proto: str | None,
    path: str,
    query: str,
) -> str | None:
    """
    算出 canonical URL；已經是 canonical 就回傳 None。

    沒設 PRIMARY_DOMAIN 時沿用目前的 host，只強制 https。
    """
    want_host = primary_domain or host
    if not want_host:
        return None

    current_scheme = scheme
    if current_scheme != "https" and forwarded_proto == "https":
        current_scheme = "https"

    if host == want_host and current_scheme == "https":
        return None

    target = f"https://{want_host}{path or '/'}"
    if query:
        target += f"?{query}"
    return target


class CanonicalHostMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, primary_domain: str | None = None):
        super().__init__(app)
        self.primary_domain = primary_domain

    async def dispatch(self, request: Request, call_next):
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        target = canonical_target(
            primary_domain=self.primary_domain,
            host=request.headers.get("host", ""),
            scheme=request.url.scheme,
            forwarded_proto=request.headers.get("x-forwarded-proto"),
            path=request.url.path,
            query=request.url.query,
        )
        if target is None:
            return await call_next(request)

        return RedirectResponse(target, status_code=301, headers={"Cache-Control": "no-store"})
