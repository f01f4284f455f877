"""Unit tests for the requests-backed transport."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from urllib3._collections import HTTPHeaderDict

from autologin.config import DEFAULT_HEADERS
from autologin.core.transport import (
    HttpStatusError,
    RequestsTransport,
    Response,
    TransportError,
)


def raw_response(
    status_code: int = 200,
    set_cookies: tuple = (),
    content: bytes = b"<html></html>",
) -> MagicMock:
    raw_headers = HTTPHeaderDict()
    raw_headers.add("Content-Type", "text/html")
    for value in set_cookies:
        raw_headers.add("Set-Cookie", value)

    raw = MagicMock()
    raw.status_code = status_code
    raw.url = "https://host/page"
    raw.content = content
    raw.encoding = "utf-8"
    raw.headers = CaseInsensitiveDict(
        {"Content-Type": "text/html", **({"Set-Cookie": ", ".join(set_cookies)} if set_cookies else {})}
    )
    raw.raw.headers = raw_headers
    return raw


@pytest.fixture
def session() -> requests.Session:
    session = requests.Session()
    session.request = MagicMock(return_value=raw_response())
    return session


class TestRequestsTransport:
    def test_default_headers(self, session) -> None:
        RequestsTransport(session=session)
        assert session.headers["User-Agent"] == DEFAULT_HEADERS["User-Agent"]

    def test_get_sends_payload_as_params(self, session) -> None:
        transport = RequestsTransport(session=session, timeout=12.0)
        response = transport.perform("https://host/login", {"payload": {"a": "1"}})

        session.request.assert_called_once_with(
            "GET",
            "https://host/login",
            headers={},
            allow_redirects=True,
            timeout=12.0,
            params={"a": "1"},
        )
        assert isinstance(response, Response)
        assert response.status_code == 200
        assert response.text == "<html></html>"

    def test_post_sends_form_body(self, session) -> None:
        transport = RequestsTransport(session=session)
        transport.perform(
            "https://host/auth",
            {
                "method": "post",
                "payload": {"user": "u"},
                "headers": {"Cookie": "a=1"},
                "follow_redirects": False,
                "timeout": 5,
                "content_type": "application/x-www-form-urlencoded",
            },
        )

        session.request.assert_called_once_with(
            "POST",
            "https://host/auth",
            headers={"Cookie": "a=1", "Content-Type": "application/x-www-form-urlencoded"},
            allow_redirects=False,
            timeout=5,
            data={"user": "u"},
        )

    def test_error_status_raises(self, session) -> None:
        session.request.return_value = raw_response(status_code=500)
        transport = RequestsTransport(session=session)

        with pytest.raises(HttpStatusError) as exc_info:
            transport.perform("https://host/page", {})
        assert exc_info.value.status_code == 500
        assert exc_info.value.response.status_code == 500

    def test_muted_error_status_returns_response(self, session) -> None:
        session.request.return_value = raw_response(status_code=404)
        transport = RequestsTransport(session=session)

        response = transport.perform("https://host/page", {"mute_http_exceptions": True})
        assert response.status_code == 404

    def test_redirect_is_not_an_error(self, session) -> None:
        session.request.return_value = raw_response(status_code=302)
        assert RequestsTransport(session=session).perform("https://host/", {}).status_code == 302

    def test_network_failure_raises_transport_error(self, session) -> None:
        session.request.side_effect = requests.ConnectionError("refused")
        transport = RequestsTransport(session=session)

        with pytest.raises(TransportError) as exc_info:
            transport.perform("https://host/page", {})
        assert not isinstance(exc_info.value, HttpStatusError)
        assert exc_info.value.url == "https://host/page"

    def test_multiple_set_cookie_headers_are_kept_apart(self, session) -> None:
        session.request.return_value = raw_response(
            set_cookies=("a=1; Expires=Wed, 21 Oct 2015 07:28:00 GMT", "b=2")
        )
        response = RequestsTransport(session=session).perform("https://host/", {})

        assert response.set_cookies() == ["a=1; Expires=Wed, 21 Oct 2015 07:28:00 GMT", "b=2"]

    def test_single_set_cookie_header(self, session) -> None:
        session.request.return_value = raw_response(set_cookies=("a=1",))
        response = RequestsTransport(session=session).perform("https://host/", {})

        assert response.headers["set-cookie"] == "a=1"
        assert response.set_cookies() == ["a=1"]

    def test_context_manager_closes_session(self, session) -> None:
        session.close = MagicMock()
        with RequestsTransport(session=session):
            pass
        session.close.assert_called_once()


class TestResponse:
    def test_text_falls_back_on_bad_encoding(self) -> None:
        response = Response(url="u", status_code=200, content="é".encode("utf-8"), encoding="nope")
        assert response.text == "é"

    def test_no_set_cookie(self) -> None:
        assert Response(url="u", status_code=200).set_cookies() == []
