from __future__ import annotations

import concurrent.futures
import logging
import time
from typing import Any, Dict, Optional

import requests

from culturejobs import config
from culturejobs.errors import UpstreamFetchError

log = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
    "User-Agent": "Mozilla/5.0 (compatible; culture-jobs/1.0; +https://www.culture.be)",
}
CHUNK_SIZE = 1024


class Fetcher:
    """GET a page from the source site and return its body text.

    One attempt per call, bounded by ``timeout`` seconds of wall-clock time
    from the request to the last body byte. Running out of time raises
    UpstreamFetchError(cause="aborted"); a non-2xx status raises
    UpstreamFetchError(status=...). Retries, if any, are the caller's business.
    """

    def __init__(self, timeout: Optional[float] = None, headers: Optional[dict[str, str]] = None):
        self.timeout = timeout if timeout is not None else config.request_timeout()
        self.headers = dict(headers or REQUEST_HEADERS)

    def get(self, url: str) -> str:
        deadline = time.monotonic() + self.timeout
        inflight: Dict[str, Any] = {}
        ex = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="culturejobs-fetch")
        try:
            fut = ex.submit(self._download, url, deadline, inflight)
            try:
                return fut.result(timeout=max(deadline - time.monotonic(), 0))
            except concurrent.futures.TimeoutError:
                response = inflight.get("response")
                if response is not None:
                    response.close()
                log.debug("fetch deadline url=%s timeout=%s", url, self.timeout)
                raise UpstreamFetchError(url, cause="aborted") from None
        finally:
            ex.shutdown(wait=False)

    def _download(self, url: str, deadline: float, inflight: Dict[str, Any]) -> str:
        try:
            r = requests.get(url, headers=self.headers, timeout=self.timeout, stream=True)
        except requests.Timeout as exc:
            raise UpstreamFetchError(url, cause="aborted") from exc
        except requests.RequestException as exc:
            raise UpstreamFetchError(url, cause=exc.__class__.__name__) from exc

        inflight["response"] = r
        try:
            if not 200 <= r.status_code < 300:
                raise UpstreamFetchError(url, status=r.status_code)
            body = bytearray()
            for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise UpstreamFetchError(url, cause="aborted")
                body.extend(chunk)
        except requests.Timeout as exc:
            raise UpstreamFetchError(url, cause="aborted") from exc
        except requests.RequestException as exc:
            raise UpstreamFetchError(url, cause=exc.__class__.__name__) from exc
        finally:
            r.close()
        try:
            return bytes(body).decode(r.encoding or "utf-8", errors="replace")
        except LookupError:
            return bytes(body).decode("utf-8", errors="replace")
