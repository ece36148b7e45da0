# OOP boundary for external i/o
# the http call and the api key live here, so the rest of the code is pure and testable
# one plain request per fetch: no retries, no backoff, no timeout unless asked for

from __future__ import annotations
import logging
import os
from typing import Optional
import requests
from dotenv import load_dotenv

load_dotenv()  # a local .env is fine for development, real deployments export the variable

logger = logging.getLogger(__name__)

class WeatherAPIError(RuntimeError):
    # base error for this layer, also used for configuration problems
    pass

class TransportError(WeatherAPIError):
    # the request never produced a usable response (dns, connection reset, ...)
    pass

class RemoteError(TransportError):
    # the provider answered, but not with a 2xx
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code

class WeatherAPIClient:
    # this class encapsulates provider details like base URL, params and auth
    BASE_URL = "https://api.tomorrow.io/v4/weather/forecast"
    API_KEY_ENV = "TOMORROW_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: Optional[float] = None,
        user_agent: str = "weathertui/0.1",
    ):
        self.api_key = api_key or os.getenv(self.API_KEY_ENV)
        if not self.api_key:
            # fail when key is missing to avoid confusing downstream errors
            raise WeatherAPIError(f"{self.API_KEY_ENV} not set")

        self.timeout = timeout
        self.session = self._build_session(user_agent)

    def _build_session(self, user_agent: str) -> requests.Session:
        s = requests.Session()
        s.headers.update({"User-Agent": user_agent, "Accept": "application/json"})
        return s

    def fetch(self, city: str) -> bytes:
        # one blocking round trip, returns the raw body for the decoder
        if not city or not city.strip():
            raise ValueError("city must not be empty")

        params = {"location": city, "apikey": self.api_key}  # requests url-escapes the values
        logger.debug("GET %s location=%r", self.BASE_URL, city)

        try:
            resp = self.session.get(self.BASE_URL, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            # wrap requests exceptions with context for easier debugging
            raise TransportError(f"Request error for {city!r}: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            # include a short response snippet to speed up triage
            snippet = (resp.text or "")[:300]
            raise RemoteError(resp.status_code, f"HTTP {resp.status_code} for {city!r}. Body: {snippet}")

        return resp.content

    def close(self) -> None:
        self.session.close()
