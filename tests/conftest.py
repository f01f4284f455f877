"""Shared fixtures for the autologin tests."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

import pytest
from requests.structures import CaseInsensitiveDict

from autologin.core.transport import Response

START_TIME = 1_700_000_000.0


class FakeClock:
    """Clock whose sleep advances time instead of blocking."""

    def __init__(self, start: float = START_TIME) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_response(
    status_code: int = 200,
    headers: Optional[Dict[str, Union[str, List[str]]]] = None,
    content: str = "",
    url: str = "https://localhost/",
) -> Response:
    return Response(
        url=url,
        status_code=status_code,
        headers=CaseInsensitiveDict(headers or {}),
        content=content.encode("utf-8"),
        encoding="utf-8",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
