from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests
from requests import Response


logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """Base provider error."""


class ProviderTimeout(ProviderError):
    """Raised when the upstream did not answer within the request timeout."""


@dataclass
class RequestConfig:
    timeout: float = 4.0
    user_agent: str = "city-weather/0.1"


class HttpProvider:
    """Base class that adds timeouts and error mapping for HTTP providers."""

    name = "http"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session or self._build_session(self.request_config)
        self._log = logging.getLogger(self.__class__.__name__)

    def _build_session(self, config: RequestConfig) -> requests.Session:
        session = requests.Session()
        session.headers.update({"User-Agent": config.user_agent})
        return session

    def _handle_response(self, response: Response) -> Response:
        if response.status_code >= 400:
            self._log.error("Provider %s returned %s: %s", self.name, response.status_code, response.text[:300])
            raise ProviderError(f"HTTP {response.status_code}")
        return response

    def _request(
        self,
        method: str,
        url: str,
        *,
        timeout_ms: Optional[int] = None,
        debug_raw: bool = False,
        **kwargs,
    ) -> Response:
        timeout = timeout_ms / 1000 if timeout_ms is not None else self.request_config.timeout
        try:
            response = self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.Timeout as exc:
            self._log.warning("Request to %s timed out after %.1fs", self.name, timeout)
            raise ProviderTimeout("timeout") from exc
        except requests.RequestException as exc:
            self._log.error("Request failed", exc_info=exc)
            raise ProviderError("request failed") from exc
        if debug_raw:
            self._log_response(response)
        return self._handle_response(response)

    def _json(self, response: Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            self._log.error("Failed to decode JSON", exc_info=exc)
            raise ProviderError("invalid json") from exc

    def _log_response(self, response: Response) -> None:
        self._log.info(
            "%s raw response %s [%s]: %s",
            self.name,
            response.url,
            response.status_code,
            response.text[:500],
        )


__all__ = ["HttpProvider", "ProviderError", "ProviderTimeout", "RequestConfig"]
