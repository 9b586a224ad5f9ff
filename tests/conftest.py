# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a scripted fake generation client and sessions wired to it.
No network access: every model reply is queued by the test.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from vidlearn.generation.stages import CodeFromSpecStage, SpecFromBasisStage
from vidlearn.llm.base_client import BaseGenerationClient
from vidlearn.llm.models import GenerationRequest, GenerationResponse
from vidlearn.logging.context import clear_context
from vidlearn.orchestrator.session import ContentSession

TEST_MODEL = "test-model"
VIDEO_URL = "https://youtu.be/abc12345678"


class FakeGenerationClient(BaseGenerationClient):
    """Replays queued replies in order.

    Each queued item is a response text, an exception to raise, or an
    ``asyncio.Future`` resolving to either (used to hold a call in flight).
    """

    def __init__(self, *replies: Any) -> None:
        self.requests: list[GenerationRequest] = []
        self._replies: list[Any] = list(replies)

    @property
    def provider_name(self) -> str:
        return "fake"

    def queue(self, *replies: Any) -> None:
        self._replies.extend(replies)

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError(f"Unexpected generation call: {request.prompt[:40]!r}")
        reply = self._replies.pop(0)
        if isinstance(reply, asyncio.Future):
            reply = await reply
        if isinstance(reply, BaseException):
            raise reply
        return GenerationResponse(content=reply, model=request.model_name, provider="fake")


# === FIXTURES: Generation ===


@pytest.fixture
def fake_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def spec_stage(fake_client: FakeGenerationClient) -> SpecFromBasisStage:
    return SpecFromBasisStage(fake_client, TEST_MODEL)


@pytest.fixture
def code_stage(fake_client: FakeGenerationClient) -> CodeFromSpecStage:
    return CodeFromSpecStage(fake_client, TEST_MODEL)


@pytest.fixture
def session(spec_stage: SpecFromBasisStage, code_stage: CodeFromSpecStage) -> ContentSession:
    return ContentSession(spec_stage, code_stage)


@pytest.fixture
def code_reply() -> str:
    return "Here is your app:\n<<<CODE>>>\n<html><body>Quiz</body></html>\n<<<END>>>\nEnjoy!"


# === FIXTURES: Logging ===


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()
