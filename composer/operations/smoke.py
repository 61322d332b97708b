"""HTTP smoke test of deployed function endpoints."""
from dataclasses import dataclass
from typing import Iterable, List, Optional

import requests

# Longer than usual: a consumption plan app may be cold-starting.
DEFAULT_TIMEOUT = 60.0


@dataclass
class ProbeResult:
    """Outcome of one GET against an endpoint."""
    url: str
    status_code: Optional[int] = None
    body: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code == 200


def probe_endpoints(urls: Iterable[str], timeout: float = DEFAULT_TIMEOUT,
                    session: Optional[requests.Session] = None) -> List[ProbeResult]:
    """GET every URL once and record its status.

    Connection failures and timeouts are recorded on the result rather than
    raised, so every endpoint gets reported.
    """
    http = session or requests.Session()
    results = []
    for url in urls:
        try:
            response = http.get(url, timeout=timeout)
            results.append(ProbeResult(url, response.status_code, response.text.strip()[:200]))
        except requests.exceptions.RequestException as e:
            results.append(ProbeResult(url, error=str(e)))
    return results
