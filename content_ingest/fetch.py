"""HTTP fetch client shared by all platform extractors."""

from __future__ import annotations

import logging

import requests

from content_ingest.config import PipelineConfig
from content_ingest.errors import FetchError

logger = logging.getLogger(__name__)


class FetchClient:
    """Single-shot GET with a browser user agent and a bounded timeout.

    There is no retry here: a failed fetch is reported as FetchError and
    the orchestrator decides whether to skip the platform or surface it.
    Use as a context manager so the underlying session is closed.
    """

    def __init__(
        self,
        user_agent: str = PipelineConfig.user_agent,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    @classmethod
    def from_config(cls, config: PipelineConfig) -> FetchClient:
        return cls(user_agent=config.user_agent, timeout=config.request_timeout_seconds)

    def fetch(self, url: str) -> str:
        """Return the response body of GET `url` as text."""
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.Timeout as exc:
            raise FetchError(url, f"timed out after {self.timeout}s") from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise FetchError(url, f"HTTP {status}", status=status) from exc
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc
        return resp.text

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> FetchClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
