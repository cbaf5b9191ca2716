import logging
import time
from typing import Dict, Optional
from urllib.parse import urljoin

import requests

from globalstream.dao.probe.base import BaseProbe

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: Dict[str, str] = {"User-Agent": "Mozilla/5.0 (GlobalStream)"}
MAX_REDIRECTS = 10


class HttpHeadProbe(BaseProbe):
    """Reachability check via HEAD.

    Only proves the endpoint answers; a reachable stream that cannot be
    decoded still counts as online. Redirects are followed by hand so the
    whole chain shares one deadline.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.session: requests.Session = session or requests.Session()
        self.headers: Dict[str, str] = headers or dict(DEFAULT_HEADERS)

    def probe(self, url: str, timeout: float) -> bool:
        deadline = time.monotonic() + timeout

        for _ in range(MAX_REDIRECTS + 1):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug(f"Probe timed out after {timeout}s: {url}")
                return False

            try:
                response = self.session.head(
                    url, headers=self.headers, allow_redirects=False, timeout=remaining
                )
            except requests.Timeout:
                logger.debug(f"Probe timed out after {timeout}s: {url}")
                return False
            except requests.RequestException as e:
                logger.debug(f"Probe failed for {url}: {type(e).__name__}")
                return False

            if not response.is_redirect:
                logger.debug(f"Probe of {url} returned {response.status_code}")
                return response.ok
            url = urljoin(url, response.headers["Location"])

        logger.debug(f"Probe gave up after {MAX_REDIRECTS} redirects: {url}")
        return False
