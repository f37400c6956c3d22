import io
import json
import urllib.error
import urllib.parse
from datetime import datetime

import pytest

from reindeer_tracks.api_client import VillreinApiClient, find_verification_token
from reindeer_tracks.config import ApiConfig
from reindeer_tracks.errors import FetchError, SessionError
from reindeer_tracks.models import SOURCE_TZ, DateRange

LOGIN_PAGE = """
<html><body>
<form action="/Account/Login" method="post">
  <input name="Email" type="text">
  <input name="__RequestVerificationToken" type="hidden" value="tok-123">
</form>
</body></html>
"""


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    def read(self):
        return self._body.encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeOpener:
    """Replays scripted (status, body) replies and records requests."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def open(self, req, timeout=None):
        form = None
        if req.data is not None:
            form = dict(urllib.parse.parse_qsl(req.data.decode("utf-8")))
        self.requests.append((req.get_method(), req.full_url, form))
        status, body = self.replies.pop(0)
        if status >= 300:
            raise urllib.error.HTTPError(req.full_url, status, "status", {}, io.BytesIO(body.encode("utf-8")))
        return FakeResponse(status, body)


def _client(replies):
    cfg = ApiConfig(base_url="https://tracking.test", username="u@x", password="pw", min_interval_seconds=0)
    opener = FakeOpener(replies)
    return VillreinApiClient(cfg, opener=opener), opener


def test_find_verification_token():
    assert find_verification_token(LOGIN_PAGE) == "tok-123"
    assert find_verification_token("<html><input name='Email'></html>") is None


def test_shared_params():
    client, _ = _client([])
    assert client.shared_params(2023) == {
        "timeInterval": "custom",
        "startDate": "2023-01-01T00:00:00+01:00",
        "endDate": "2024-01-01T00:00:00+01:00",
        "years": "[]",
        "countyId": "0",
        "municipalityId": "0",
        "projectIds": "[124730]",
    }


def test_login_success_is_redirect():
    client, opener = _client([(200, LOGIN_PAGE), (302, "")])
    client.ensure_session()
    client.ensure_session()
    assert client.is_authenticated
    assert len(opener.requests) == 2
    method, url, form = opener.requests[1]
    assert method == "POST"
    assert url == "https://tracking.test/Account/Login?returnurl=%2F"
    assert form == {"Email": "u@x", "Password": "pw", "__RequestVerificationToken": "tok-123", "RememberMe": "false"}


def test_login_without_redirect_fails():
    client, _ = _client([(200, LOGIN_PAGE), (200, LOGIN_PAGE)])
    with pytest.raises(SessionError):
        client.ensure_session()
    assert not client.is_authenticated


def test_login_page_without_token():
    client, _ = _client([(200, "<html></html>")])
    with pytest.raises(SessionError):
        client.ensure_session()


def test_list_individuals_projects_fields():
    vm = [{"id": 7, "name": "Siri", "specieName": "Villrein", "ageString": "Voksen", "positions": [1, 2]}]
    client, opener = _client([(200, LOGIN_PAGE), (302, ""), (200, json.dumps({"vm": vm}))])
    [item] = client.list_individuals(2023)
    assert item["id"] == 7
    assert item["ageString"] == "Voksen"
    assert "positions" not in item
    assert "name" not in item
    assert opener.requests[-1][1] == "https://tracking.test/Home/Individuals"


def test_fetch_positions_form_and_page():
    page = {"vm": [{"id": "7", "positions": []}], "positionLimitExceeded": True}
    client, opener = _client([(200, LOGIN_PAGE), (302, ""), (200, json.dumps(page))])
    window = DateRange(datetime(2023, 3, 1, tzinfo=SOURCE_TZ), datetime(2023, 6, 1, tzinfo=SOURCE_TZ))
    result = client.fetch_positions("7", window)
    assert result.position_limit_exceeded
    assert result.individuals == page["vm"]
    _, url, form = opener.requests[-1]
    assert url == "https://tracking.test/Home/Positions"
    assert form["individualIds"] == "7"
    assert form["startDate"] == "2023-03-01T00:00:00+01:00"
    assert form["endDate"] == "2023-06-01T00:00:00+01:00"
    assert form["showAllPositions"] == "true"
    assert form["speciesId"] == "3"


def test_post_errors_raise_fetch_error():
    client, _ = _client([(200, LOGIN_PAGE), (302, ""), (500, "oops")])
    with pytest.raises(FetchError):
        client.list_individuals(2023)

    client, _ = _client([(200, LOGIN_PAGE), (302, ""), (200, "not json")])
    with pytest.raises(FetchError):
        client.list_individuals(2023)


def test_non_object_reply_raises_fetch_error():
    client, _ = _client([(200, LOGIN_PAGE), (302, ""), (200, json.dumps(["unexpected"]))])
    window = DateRange(datetime(2023, 3, 1, tzinfo=SOURCE_TZ), datetime(2023, 6, 1, tzinfo=SOURCE_TZ))
    with pytest.raises(FetchError, match="expected an object"):
        client.fetch_positions("7", window)
