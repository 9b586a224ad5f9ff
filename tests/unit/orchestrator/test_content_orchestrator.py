# tests/unit/orchestrator/test_content_orchestrator.py — v1
"""Tests for orchestrator/content_orchestrator.py: the generation state machine."""

from __future__ import annotations

import asyncio

import pytest

from tests.conftest import VIDEO_URL, FakeGenerationClient
from vidlearn.core.errors import (
    AbnormalStopError,
    InvalidTransitionError,
    PromptBlockedError,
)
from vidlearn.generation.prompts import SPEC_ADDENDUM
from vidlearn.generation.stages import CodeFromSpecStage, SpecFromBasisStage
from vidlearn.orchestrator.content_orchestrator import (
    UNKNOWN_ERROR_MESSAGE,
    URL_SCHEME_HINT,
    ContentOrchestrator,
)
from vidlearn.orchestrator.state import CODE_EDIT_NOTICE, ContentState, RunState, Seed

SPEC_REPLY = '{"spec": "Build a quiz."}'
FULL_SPEC = "Build a quiz." + SPEC_ADDENDUM


@pytest.fixture
def orchestrator(spec_stage: SpecFromBasisStage, code_stage: CodeFromSpecStage) -> ContentOrchestrator:
    return ContentOrchestrator(VIDEO_URL, spec_stage, code_stage)


def _record(orch: ContentOrchestrator) -> list[ContentState]:
    seen: list[ContentState] = []
    orch.subscribe(seen.append)
    return seen


async def _ready(orch: ContentOrchestrator, client: FakeGenerationClient, code_reply: str) -> None:
    client.queue(SPEC_REPLY, code_reply)
    await orch.run()
    assert orch.state.kind is RunState.READY


class TestActivation:
    def test_initial_state_loading_spec(self, orchestrator: ContentOrchestrator):
        assert orchestrator.state.kind is RunState.LOADING_SPEC
        assert orchestrator.is_busy is True

    @pytest.mark.asyncio
    async def test_full_run(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        seen = _record(orchestrator)
        fake_client.queue(SPEC_REPLY, code_reply)

        state = await orchestrator.run()

        assert state.kind is RunState.READY
        assert orchestrator.spec == FULL_SPEC
        assert orchestrator.code == "<html><body>Quiz</body></html>"
        assert [s.kind for s in seen] == [
            RunState.LOADING_SPEC, RunState.LOADING_CODE, RunState.READY,
        ]
        spec_req, code_req = fake_client.requests
        assert spec_req.video_url == VIDEO_URL
        assert spec_req.wants_json is True
        assert code_req.prompt == FULL_SPEC

    @pytest.mark.asyncio
    async def test_busy_flag_follows_transitions(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        busy: list[bool] = []
        orchestrator.subscribe(lambda s: busy.append(s.is_busy))
        fake_client.queue(SPEC_REPLY, code_reply)
        await orchestrator.run()
        assert busy == [True, True, False]

    @pytest.mark.asyncio
    async def test_seeded_skips_generation(
        self, spec_stage: SpecFromBasisStage, code_stage: CodeFromSpecStage,
        fake_client: FakeGenerationClient,
    ):
        orch = ContentOrchestrator(
            VIDEO_URL, spec_stage, code_stage, seed=Seed(spec="S", code="C"),
        )
        assert orch.state.kind is RunState.READY
        seen = _record(orch)

        state = await orch.run()

        assert state == ContentState.ready("S", "C")
        assert fake_client.requests == []
        assert [s.kind for s in seen] == [RunState.READY]

    @pytest.mark.asyncio
    async def test_partial_seed_runs_pipeline(
        self, spec_stage: SpecFromBasisStage, code_stage: CodeFromSpecStage,
        fake_client: FakeGenerationClient, code_reply: str,
    ):
        orch = ContentOrchestrator(VIDEO_URL, spec_stage, code_stage, seed=Seed(spec="S"))
        fake_client.queue(SPEC_REPLY, code_reply)
        await orch.run()
        assert orch.spec == FULL_SPEC
        assert len(fake_client.requests) == 2

    @pytest.mark.asyncio
    async def test_run_only_once(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        with pytest.raises(RuntimeError):
            await orchestrator.run()

    @pytest.mark.asyncio
    async def test_seeded_run_keeps_pending_spec_edit(
        self, spec_stage: SpecFromBasisStage, code_stage: CodeFromSpecStage,
        fake_client: FakeGenerationClient, code_reply: str,
    ):
        orch = ContentOrchestrator(
            VIDEO_URL, spec_stage, code_stage, seed=Seed(spec="S", code="C"),
        )
        pending: asyncio.Future = asyncio.get_running_loop().create_future()
        fake_client.queue(pending)
        commit = asyncio.create_task(orch.commit_spec_edit("New spec"))
        for _ in range(5):
            await asyncio.sleep(0)
        assert orch.state.kind is RunState.LOADING_CODE

        state = await orch.run()

        assert state.kind is RunState.LOADING_CODE
        assert state.spec == "New spec"
        assert orch.is_busy is True
        with pytest.raises(InvalidTransitionError):
            orch.edit_code("<p>hand edit</p>")

        pending.set_result(code_reply)
        await commit
        assert orch.state == ContentState.ready("New spec", "<html><body>Quiz</body></html>")

    @pytest.mark.asyncio
    async def test_seeded_run_keeps_prior_code_edit(
        self, spec_stage: SpecFromBasisStage, code_stage: CodeFromSpecStage,
    ):
        orch = ContentOrchestrator(
            VIDEO_URL, spec_stage, code_stage, seed=Seed(spec="S", code="C"),
        )
        orch.edit_code("<p>mine</p>")
        state = await orch.run()
        assert state.code == "<p>mine</p>"

    def test_activation_key(self, spec_stage: SpecFromBasisStage, code_stage: CodeFromSpecStage):
        orch = ContentOrchestrator(VIDEO_URL, spec_stage, code_stage, reload_token=3)
        assert orch.activation_key == (VIDEO_URL, 3)


class TestFailures:
    @pytest.mark.asyncio
    async def test_stage1_no_json(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient,
    ):
        fake_client.queue("Sorry, I cannot help with that.")
        state = await orchestrator.run()

        assert state.kind is RunState.ERROR
        assert "Malformed JSON" in (state.error or "")
        assert state.spec == ""
        assert len(fake_client.requests) == 1

    @pytest.mark.asyncio
    async def test_stage1_client_error_message_verbatim(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient,
    ):
        error = PromptBlockedError("SAFETY")
        fake_client.queue(error)
        state = await orchestrator.run()
        assert state.error == str(error)

    @pytest.mark.asyncio
    async def test_stage2_failure_keeps_spec(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient,
    ):
        fake_client.queue(SPEC_REPLY, AbnormalStopError("SAFETY"))
        state = await orchestrator.run()

        assert state.kind is RunState.ERROR
        assert state.spec == FULL_SPEC
        assert state.code == ""
        assert "safety settings" in (state.error or "")

    @pytest.mark.asyncio
    async def test_stage2_missing_markers(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient,
    ):
        fake_client.queue(SPEC_REPLY, "<html>no markers</html>")
        state = await orchestrator.run()
        assert state.kind is RunState.ERROR
        assert state.spec == FULL_SPEC

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error_state(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient,
    ):
        fake_client.queue(RuntimeError(""))
        state = await orchestrator.run()
        assert state.kind is RunState.ERROR
        assert state.error == UNKNOWN_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_error_hint_for_scheme_less_basis(
        self, spec_stage: SpecFromBasisStage, code_stage: CodeFromSpecStage,
        fake_client: FakeGenerationClient,
    ):
        orch = ContentOrchestrator("youtu.be/abc12345678", spec_stage, code_stage)
        assert orch.error_hint is None
        fake_client.queue(RuntimeError("bad url"))
        await orch.run()
        assert orch.error_hint == URL_SCHEME_HINT

    @pytest.mark.asyncio
    async def test_no_error_hint_for_http_basis(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient,
    ):
        fake_client.queue(RuntimeError("boom"))
        await orchestrator.run()
        assert orchestrator.error_hint is None


class TestSpecEdit:
    @pytest.mark.asyncio
    async def test_unchanged_spec_is_noop(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        seen = _record(orchestrator)
        before = orchestrator.state

        orchestrator.begin_spec_edit()
        state = await orchestrator.commit_spec_edit(f"  {FULL_SPEC}\n")

        assert state is before
        assert seen == []
        assert len(fake_client.requests) == 2
        assert orchestrator.spec_edit.active is False

    @pytest.mark.asyncio
    async def test_changed_spec_regenerates_code_only(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        seen = _record(orchestrator)
        fake_client.queue("<<<CODE>>><html>v2</html><<<END>>>")

        state = await orchestrator.commit_spec_edit("  A flashcard app.  ")

        assert state.kind is RunState.READY
        assert state.spec == "A flashcard app."
        assert state.code == "<html>v2</html>"
        assert [s.kind for s in seen] == [RunState.LOADING_CODE, RunState.READY]
        assert seen[0].spec == "A flashcard app."
        last = fake_client.requests[-1]
        assert last.prompt == "A flashcard app."
        assert last.video_url is None
        assert len(fake_client.requests) == 3

    @pytest.mark.asyncio
    async def test_edited_spec_gets_no_addendum(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        fake_client.queue(code_reply)
        await orchestrator.commit_spec_edit("Plain spec")
        assert SPEC_ADDENDUM not in fake_client.requests[-1].prompt

    @pytest.mark.asyncio
    async def test_commit_from_edit_buffer(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        assert orchestrator.begin_spec_edit() == FULL_SPEC
        orchestrator.spec_edit.update("Buffered spec")
        fake_client.queue(code_reply)

        state = await orchestrator.commit_spec_edit()

        assert state.spec == "Buffered spec"
        assert orchestrator.spec_edit.active is False

    @pytest.mark.asyncio
    async def test_cancel_edit_keeps_state(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        orchestrator.begin_spec_edit()
        orchestrator.spec_edit.update("discarded")
        orchestrator.cancel_spec_edit()
        assert orchestrator.spec == FULL_SPEC
        assert orchestrator.spec_edit.buffer == ""

    @pytest.mark.asyncio
    async def test_recover_from_stage2_error(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        fake_client.queue(SPEC_REPLY, "garbage")
        await orchestrator.run()
        assert orchestrator.state.kind is RunState.ERROR

        fake_client.queue(code_reply)
        state = await orchestrator.commit_spec_edit("Fixed spec")

        assert state.kind is RunState.READY
        assert state.error is None

    @pytest.mark.asyncio
    async def test_edit_failure_goes_to_error(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        fake_client.queue("no markers")
        state = await orchestrator.commit_spec_edit("New spec")
        assert state.kind is RunState.ERROR
        assert state.spec == "New spec"

    @pytest.mark.asyncio
    async def test_commit_while_loading_rejected(self, orchestrator: ContentOrchestrator):
        with pytest.raises(InvalidTransitionError):
            await orchestrator.commit_spec_edit("x")
        with pytest.raises(InvalidTransitionError):
            orchestrator.begin_spec_edit()

    @pytest.mark.asyncio
    async def test_blank_spec_rejected(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        with pytest.raises(ValueError):
            await orchestrator.commit_spec_edit("   ")
        assert orchestrator.state.kind is RunState.READY


class TestCodeEdit:
    @pytest.mark.asyncio
    async def test_edit_code_stays_ready(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        seen = _record(orchestrator)

        state = orchestrator.edit_code("<html>hand edited</html>")

        assert state.kind is RunState.READY
        assert state.code == "<html>hand edited</html>"
        assert state.spec == FULL_SPEC
        assert state.notice == CODE_EDIT_NOTICE
        assert len(seen) == 1
        assert len(fake_client.requests) == 2

    @pytest.mark.asyncio
    async def test_code_edit_then_unchanged_spec_does_not_regenerate(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        orchestrator.edit_code("<html>diverged</html>")
        await orchestrator.commit_spec_edit(FULL_SPEC)
        assert orchestrator.code == "<html>diverged</html>"
        assert len(fake_client.requests) == 2

    def test_edit_code_outside_ready_rejected(self, orchestrator: ContentOrchestrator):
        with pytest.raises(InvalidTransitionError):
            orchestrator.edit_code("x")

    @pytest.mark.asyncio
    async def test_none_code_becomes_empty(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        assert orchestrator.edit_code(None).code == ""


class TestRunFromSpec:
    @pytest.mark.asyncio
    async def test_stage2_only(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        seen = _record(orchestrator)
        fake_client.queue(code_reply)

        state = await orchestrator.run_from_spec("  A flashcard app.\n")

        assert state == ContentState.ready("A flashcard app.", "<html><body>Quiz</body></html>")
        assert [s.kind for s in seen] == [RunState.LOADING_CODE, RunState.READY]
        assert len(fake_client.requests) == 1
        assert fake_client.requests[0].prompt == "A flashcard app."

    @pytest.mark.asyncio
    async def test_failure_keeps_spec(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient,
    ):
        fake_client.queue("no markers")
        state = await orchestrator.run_from_spec("Spec")
        assert state.kind is RunState.ERROR
        assert state.spec == "Spec"

    @pytest.mark.asyncio
    async def test_blank_spec_rejected(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient,
    ):
        with pytest.raises(ValueError):
            await orchestrator.run_from_spec("  ")
        assert fake_client.requests == []

    @pytest.mark.asyncio
    async def test_not_after_run(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        await _ready(orchestrator, fake_client, code_reply)
        with pytest.raises(RuntimeError):
            await orchestrator.run_from_spec("Spec")


class TestObservers:
    @pytest.mark.asyncio
    async def test_unsubscribe(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        seen: list[ContentState] = []
        unsubscribe = orchestrator.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        await _ready(orchestrator, fake_client, code_reply)
        assert seen == []

    @pytest.mark.asyncio
    async def test_observer_sees_state_synchronously(
        self, orchestrator: ContentOrchestrator, fake_client: FakeGenerationClient, code_reply: str,
    ):
        checks: list[bool] = []
        orchestrator.subscribe(lambda s: checks.append(orchestrator.state is s))
        await _ready(orchestrator, fake_client, code_reply)
        assert checks == [True, True, True]
