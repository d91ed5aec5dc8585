"""
HTTP client for the siteprobe endpoints
"""

import requests
from dataclasses import dataclass
from typing import Optional
from .config import config


DEFAULT_TIMEOUT = 5.0


@dataclass
class ProbeOutcome:
    """Result of one probe call"""

    endpoint: str
    status_code: int
    body: str

    @property
    def healthy(self) -> bool:
        return self.status_code == 200

    @property
    def failures(self) -> list[str]:
        """Failure tags parsed from an 'unready: a,b' body"""
        text = self.body.strip()
        if not text.startswith('unready:'):
            return []
        return [tag for tag in text[len('unready:'):].strip().split(',') if tag]


class ProbeClientError(Exception):
    pass


class ProbeClient:
    """Client for the siteprobe service"""

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.url = (url or config.url or "").rstrip('/')
        self.token = token if token is not None else config.token
        self.timeout = timeout

        if not self.url:
            raise ValueError(
                "Service URL is required. "
                "Run 'probectl config set --url <url>' or set PROBECTL_URL."
            )

        self.session = requests.Session()

    def _probe(self, endpoint: str) -> ProbeOutcome:
        """GET a probe endpoint; non-2xx answers are results, not errors"""
        url = f"{self.url}{endpoint}"
        params = {'t': self.token} if self.token else None
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.ConnectionError:
            raise ProbeClientError(f"Cannot connect to {self.url}. Is siteprobe running?")
        except requests.exceptions.Timeout:
            raise ProbeClientError(f"Request to {endpoint} timed out after {self.timeout}s")

        if response.status_code == 404:
            raise ProbeClientError(f"Not found: {endpoint} (wrong or missing token?)")

        return ProbeOutcome(endpoint=endpoint, status_code=response.status_code, body=response.text)

    def live(self) -> ProbeOutcome:
        """Liveness probe"""
        return self._probe('/healthz')

    def ready(self) -> ProbeOutcome:
        """Readiness probe"""
        return self._probe('/readyz')
