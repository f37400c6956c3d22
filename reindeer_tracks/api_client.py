"""HTTP client for the position source (cookie session, form posts, JSON replies).

This module only uses the Python standard library for HTTP.

Important:
    - The source is rate and volume limited: requests are spaced by
      ``min_interval_seconds`` and a response may be truncated
      (``positionLimitExceeded``), which the fetch orchestrator handles.
    - Login is a form post scraped from the login page; a 302 redirect is the
      only success signal.
"""

from __future__ import annotations

import http.cookiejar
import json
import logging
import threading
import time
import urllib.error
import urllib.parse
import urllib.request
from html.parser import HTMLParser
from typing import Any

from reindeer_tracks.config import ApiConfig
from reindeer_tracks.errors import FetchError, SessionError
from reindeer_tracks.fetcher import PositionsPage
from reindeer_tracks.models import DateRange
from reindeer_tracks.timeutils import format_source_datetime, tzinfo_from_name, year_range

logger = logging.getLogger(__name__)

TOKEN_FIELD = "__RequestVerificationToken"

INDIVIDUAL_FIELDS = ("id", "specieName", "latitude", "longitude", "date", "sex", "age", "ageString")


class _TokenFinder(HTMLParser):
    """Pick the anti-forgery token out of the login form."""

    def __init__(self) -> None:
        super().__init__()
        self.token: str | None = None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self.token is not None or tag != "input":
            return
        values = dict(attrs)
        if values.get("name") == TOKEN_FIELD:
            self.token = values.get("value") or ""


def find_verification_token(html: str) -> str | None:
    """Return the value of the ``__RequestVerificationToken`` input, if present."""

    finder = _TokenFinder()
    finder.feed(html)
    finder.close()
    return finder.token


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    """Surface redirects as HTTPError so the login status code can be read."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # noqa: ANN001
        return None


class VillreinApiClient:
    """Position source backed by the tracking web application."""

    def __init__(self, config: ApiConfig, opener: urllib.request.OpenerDirector | None = None) -> None:
        self._cfg = config
        self._tz = tzinfo_from_name(config.tz_name)
        self._cookies = http.cookiejar.CookieJar()
        self._opener = opener or urllib.request.build_opener(
            urllib.request.HTTPCookieProcessor(self._cookies),
            _NoRedirect(),
        )
        self._authenticated = False
        self._auth_lock = threading.Lock()
        self._throttle_lock = threading.Lock()
        self._last_request_at = 0.0

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    def ensure_session(self) -> None:
        """Log in once; later calls are no-ops.

        Raises:
            SessionError: If the token cannot be found or the login is rejected.
        """

        with self._auth_lock:
            if self._authenticated:
                return
            login_url = f"{self._cfg.base_url}/Account/Login?returnurl=%2F"
            status, body = self._send(login_url)
            token = find_verification_token(body)
            if token is None:
                raise SessionError(f"Login form without {TOKEN_FIELD} (HTTP {status})")

            form = {
                "Email": self._cfg.username,
                "Password": self._cfg.password,
                TOKEN_FIELD: token,
                "RememberMe": "false",
            }
            status, _ = self._send(login_url, form)
            if status != 302:
                raise SessionError(f"Not authenticated (HTTP {status})")
            self._authenticated = True
            logger.info("Authenticated against %s", self._cfg.base_url)

    def shared_params(self, year: int) -> dict[str, str]:
        """Form fields common to all queries for ``year``."""

        r = year_range(year, self._tz)
        return {
            "timeInterval": "custom",
            "startDate": format_source_datetime(r.start, self._tz),
            "endDate": format_source_datetime(r.end, self._tz),
            "years": "[]",
            "countyId": "0",
            "municipalityId": "0",
            "projectIds": self._cfg.project_ids,
        }

    def list_individuals(self, year: int) -> list[dict[str, Any]]:
        """Return the individuals with positions in ``year`` (without positions)."""

        self.ensure_session()
        raw = self._post_json("/Home/Individuals", self.shared_params(year))
        return [{k: item.get(k) for k in INDIVIDUAL_FIELDS} for item in raw.get("vm") or []]

    def fetch_positions(self, individual_id: str, date_range: DateRange) -> PositionsPage:
        """Fetch one page of positions for an individual within ``date_range``."""

        self.ensure_session()
        params = {
            "individualIds": individual_id,
            **self.shared_params(date_range.start.year),
            "startDate": format_source_datetime(date_range.start, self._tz),
            "endDate": format_source_datetime(date_range.end, self._tz),
            "showAllPositions": "true",
            "showWithLocations": "false",
            "speciesId": self._cfg.species_id,
        }
        logger.debug("Positions %s %s..%s", individual_id, params["startDate"], params["endDate"])
        return PositionsPage.from_json(self._post_json("/Home/Positions", params))

    def _post_json(self, path: str, form: dict[str, str]) -> dict[str, Any]:
        status, body = self._send(f"{self._cfg.base_url}{path}", form)
        if status != 200:
            raise FetchError(f"POST {path} returned HTTP {status}")
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise FetchError(f"POST {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise FetchError(f"POST {path} returned {type(data).__name__}, expected an object")
        return data

    def _send(self, url: str, form: dict[str, str] | None = None) -> tuple[int, str]:
        """Send GET (no form) or form-encoded POST; return (status, body).

        Redirect and error statuses are returned, not raised.
        """

        data = urllib.parse.urlencode(form).encode("utf-8") if form is not None else None
        req = urllib.request.Request(
            url,
            data=data,
            headers={
                "User-Agent": self._cfg.user_agent,
                "Content-Type": "application/x-www-form-urlencoded",
            },
            method="POST" if form is not None else "GET",
        )
        self._sleep_if_needed()
        try:
            with self._opener.open(req, timeout=self._cfg.timeout_seconds) as resp:
                return resp.status, resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace") if exc.fp is not None else ""
            return exc.code, body
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            raise FetchError(f"Request to {url} failed: {exc}") from exc

    def _sleep_if_needed(self) -> None:
        with self._throttle_lock:
            now = time.time()
            wait = self._cfg.min_interval_seconds - (now - self._last_request_at)
            if wait > 0:
                time.sleep(wait)
            self._last_request_at = time.time()
