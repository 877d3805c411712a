"""Unit tests for PromptOrchestrator and delegation classification."""

import asyncio

import pytest

from taskrouter.core.engine import ORCHESTRATOR_ID, PromptOrchestrator, classify_delegation
from taskrouter.core.errors import UpstreamFailure
from taskrouter.core.registry import Registry, default_registry
from taskrouter.core.types import (
    CapabilityDescriptor,
    ConversationTurn,
    TaskContext,
    TaskRequest,
)

from conftest import StubCompletion


def two_agent_registry():
    return Registry([
        CapabilityDescriptor("A", "first agent", ("x",)),
        CapabilityDescriptor("B", "second agent", ("y",)),
    ])


class TestClassifyDelegation:

    def test_kind_tag_match(self):
        decision = classify_delegation(two_agent_registry().list(), "done", "x-task")

        assert decision.should_delegate
        assert decision.target == "A"
        assert "A" in decision.reason

    def test_reply_tag_match_is_case_insensitive(self):
        decision = classify_delegation(default_registry().list(), "Needs DEBUGGING help", "chat")

        assert decision.target == "CodeAssistantAgent"

    def test_reply_name_match(self):
        decision = classify_delegation(
            default_registry().list(),
            "I would hand this to the contentgenerationagent.",
            "chat",
        )

        assert decision.target == "ContentGenerationAgent"

    def test_first_registered_wins(self):
        decision = classify_delegation(two_agent_registry().list(), "y and x", "task")

        assert decision.target == "A"

    def test_no_match(self):
        decision = classify_delegation(
            default_registry().list(), "Here is a poem about the sea", "general_chat",
        )

        assert not decision.should_delegate
        assert decision.target is None


class TestHandle:

    @pytest.mark.asyncio
    async def test_delegated_result(self):
        orchestrator = PromptOrchestrator(StubCompletion("done"), two_agent_registry())

        result = await orchestrator.handle(TaskRequest(kind="x-task", parameters={}))

        assert result.succeeded
        assert result.message == "Task delegated to A"
        assert result.data == {
            "delegatedTo": "A",
            "reason": "Task matches A capabilities",
            "originalResponse": "done",
        }
        assert result.error is None

    @pytest.mark.asyncio
    async def test_not_delegated_result(self):
        stub = StubCompletion("Here is a poem about the sea")
        orchestrator = PromptOrchestrator(stub, default_registry())

        result = await orchestrator.handle(
            TaskRequest(kind="general_chat", parameters={"topic": "sea"})
        )

        assert result.succeeded
        assert result.message == "Here is a poem about the sea"
        assert result.data == {"taskType": "general_chat", "processedBy": ORCHESTRATOR_ID}
        assert "delegatedTo" not in result.data

    @pytest.mark.asyncio
    async def test_ping_pong(self):
        orchestrator = PromptOrchestrator(StubCompletion("pong"), default_registry())

        result = await orchestrator.handle(TaskRequest(kind="ping", parameters={}))

        assert result.succeeded
        assert "pong" in result.message
        assert "delegatedTo" not in result.data

    @pytest.mark.asyncio
    async def test_identical_inputs_give_identical_results(self):
        request = TaskRequest(kind="statistics", parameters={"rows": [1, 2, 3]})
        orchestrator = PromptOrchestrator(StubCompletion("mean is 2"), default_registry())

        first = await orchestrator.handle(request)
        second = await orchestrator.handle(request)

        assert first == second
        assert first.data["delegatedTo"] == "DataAnalysisAgent"

    @pytest.mark.asyncio
    async def test_passes_prompts_and_translated_history(self):
        stub = StubCompletion("fine")
        orchestrator = PromptOrchestrator(stub, two_agent_registry())
        context = TaskContext(
            session_id="s1",
            history=[
                ConversationTurn(role="user", content="hi"),
                ConversationTurn(role="assistant", content="hello"),
            ],
            metadata={"channel": "web"},
        )

        await orchestrator.handle(TaskRequest(kind="chat", parameters={"m": 1}, context=context))

        system_prompt, history, prompt = stub.calls[0]
        assert "- A: first agent (Capabilities: x)" in system_prompt
        assert history == [
            {"role": "user", "content": "hi"},
            {"role": "model", "content": "hello"},
        ]
        assert prompt.startswith("Task Type: chat\n")
        assert "Additional Context" in prompt

    @pytest.mark.asyncio
    async def test_runtime_registration_applies_to_next_request(self):
        orchestrator = PromptOrchestrator(StubCompletion("ok"), default_registry())

        before = await orchestrator.handle(TaskRequest(kind="sql_report", parameters={}))
        orchestrator.register(CapabilityDescriptor("SqlAgent", "Writes SQL", ("sql",)))
        after = await orchestrator.handle(TaskRequest(kind="sql_report", parameters={}))

        assert "delegatedTo" not in before.data
        assert after.data["delegatedTo"] == "SqlAgent"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            UpstreamFailure("GEMINI HTTP ERROR (503)"),
            TimeoutError("timed out"),
            RuntimeError(""),
        ],
    )
    async def test_upstream_failure_resolves_to_failed_result(self, error):
        orchestrator = PromptOrchestrator(StubCompletion(error=error), default_registry())

        result = await orchestrator.handle(TaskRequest(kind="chat", parameters={}))

        assert not result.succeeded
        assert result.error
        assert result.message is None
        assert result.data is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", ["", "   "])
    async def test_empty_reply_is_returned_as_is(self, reply):
        orchestrator = PromptOrchestrator(StubCompletion(reply), default_registry())

        result = await orchestrator.handle(TaskRequest(kind="ping", parameters={}))

        assert result.succeeded
        assert result.message == reply
        assert result.data == {"taskType": "ping", "processedBy": ORCHESTRATOR_ID}

    @pytest.mark.asyncio
    async def test_non_text_reply_is_a_failure(self):
        orchestrator = PromptOrchestrator(StubCompletion(None), default_registry())

        result = await orchestrator.handle(TaskRequest(kind="ping", parameters={}))

        assert not result.succeeded
        assert result.error

    @pytest.mark.asyncio
    async def test_circular_parameters_give_failed_result(self):
        stub = StubCompletion("pong")
        orchestrator = PromptOrchestrator(stub, default_registry())
        parameters = {"name": "loop"}
        parameters["self"] = parameters

        result = await orchestrator.handle(TaskRequest(kind="ping", parameters=parameters))

        assert not result.succeeded
        assert result.error
        assert stub.calls == []

    @pytest.mark.asyncio
    async def test_unserializable_keys_give_failed_result(self):
        stub = StubCompletion("pong")
        orchestrator = PromptOrchestrator(stub, default_registry())

        result = await orchestrator.handle(
            TaskRequest(kind="ping", parameters={("a", "b"): 1})
        )

        assert not result.succeeded
        assert "keys must be" in result.error
        assert stub.calls == []

    @pytest.mark.asyncio
    async def test_external_cancellation_becomes_failed_result(self):
        orchestrator = PromptOrchestrator(
            StubCompletion(error=asyncio.CancelledError()), default_registry(),
        )

        result = await orchestrator.handle(TaskRequest(kind="chat", parameters={}))

        assert not result.succeeded
        assert result.error == "Request was cancelled"

    def test_to_dict_wire_form(self):
        from taskrouter.core.types import OrchestrationResult

        assert OrchestrationResult(succeeded=False, error="boom").to_dict() == {
            "success": False,
            "error": "boom",
        }
