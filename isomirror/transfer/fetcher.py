from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..infra.errors import FetchError
from ..infra.models import DownloadAttempt

T = TypeVar("T")

CHUNK_BYTES = 1024 * 1024
USER_AGENT = "isomirror-fetcher"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a fixed delay between attempts."""

    max_attempts: int = 3
    delay_seconds: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")


def build_session(*, transport_retries: int = 3, transport_backoff_seconds: float = 5.0) -> requests.Session:
    """requests.Session with its own connection-level retry on 429/5xx.

    This sits underneath the Fetcher's attempt loop, the same layering as
    `curl --retry` inside a shell retry loop.
    """
    retry = Retry(
        total=transport_retries,
        backoff_factor=transport_backoff_seconds,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
    )
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class Fetcher:
    def __init__(
        self,
        *,
        policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 60.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.policy = policy or RetryPolicy()
        self.session = session if session is not None else build_session()
        self.timeout_seconds = timeout_seconds
        self.sleep = sleep
        self.attempts: List[DownloadAttempt] = []

    def _with_retry(self, url: str, op: Callable[[], T]) -> T:
        max_attempts = self.policy.max_attempts
        last_error = ""
        for attempt in range(1, max_attempts + 1):
            print(f"[fetch] Attempt {attempt}/{max_attempts}: {url.rsplit('/', 1)[-1] or url}")
            try:
                result = op()
            except (requests.RequestException, OSError) as e:
                last_error = str(e)
                self.attempts.append(DownloadAttempt(url, attempt, max_attempts, "failure", last_error))
                if attempt < max_attempts:
                    print(f"[fetch] Attempt {attempt}/{max_attempts} failed: {e}. Retrying in {self.policy.delay_seconds:g}s")
                    self.sleep(self.policy.delay_seconds)
                continue
            self.attempts.append(DownloadAttempt(url, attempt, max_attempts, "success"))
            return result

        print(f"[fetch] Failed to download {url} after {max_attempts} attempts")
        raise FetchError(url, max_attempts, last_error)

    def fetch_text(self, url: str) -> str:
        def _get() -> str:
            r = self.session.get(url, timeout=self.timeout_seconds)
            try:
                r.raise_for_status()
                return r.text
            finally:
                r.close()

        return self._with_retry(url, _get)

    def fetch_to_file(self, url: str, dest: Path) -> Path:
        """Stream url into dest. A failed attempt leaves no file behind."""
        dest = Path(dest)
        part = dest.with_name(dest.name + ".part")

        def _download() -> Path:
            dest.parent.mkdir(parents=True, exist_ok=True)
            r = self.session.get(url, stream=True, timeout=self.timeout_seconds)
            try:
                r.raise_for_status()
                with part.open("wb") as f:
                    for chunk in r.iter_content(chunk_size=CHUNK_BYTES):
                        if chunk:
                            f.write(chunk)
                part.replace(dest)
                return dest
            finally:
                r.close()
                if part.exists():
                    part.unlink()

        return self._with_retry(url, _download)
