"""URL probing over plain HTTP."""

from __future__ import annotations

import logging
import urllib.error
import urllib.request

from wolfi_dev.providers.http.base import UrlProber

logger = logging.getLogger(__name__)


class UrllibProber(UrlProber):
    def __init__(self, user_agent: str = "wolfi-dev") -> None:
        self._user_agent = user_agent

    def _request(self, url: str, method: str) -> urllib.request.Request:
        request = urllib.request.Request(url, method=method)
        request.add_header("User-Agent", self._user_agent)
        return request

    def exists(self, url: str) -> bool:
        try:
            with urllib.request.urlopen(self._request(url, "HEAD")) as response:
                status = response.status
        except urllib.error.HTTPError as exc:
            logger.debug("HEAD %s -> %d", url, exc.code)
            return False
        except urllib.error.URLError as exc:
            logger.debug("HEAD %s failed: %s", url, exc.reason)
            return False
        logger.debug("HEAD %s -> %d", url, status)
        return 200 <= status < 300
