"""Shared fixtures for pedaru-assist tests."""
from __future__ import annotations

import json
from typing import Callable, List

import httpx
import pytest

from pedaru_assist import upstream


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep credentials, settings and upstream traffic local to each test."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("PEDARU_SETTINGS_DB", str(tmp_path / "settings.db"))
    monkeypatch.setattr(upstream, "UPSTREAM_TRANSPORT", None)


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def gemini_upstream(monkeypatch) -> Callable[..., List[httpx.Request]]:
    """Install a fake Gemini endpoint and return the list of requests it saw."""

    def install(status_code: int = 200, body=None, text: str = None) -> List[httpx.Request]:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=body)

        monkeypatch.setattr(upstream, "UPSTREAM_TRANSPORT", httpx.MockTransport(handler))
        return seen

    return install


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content)
