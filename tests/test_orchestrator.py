"""Turn lifecycle tests for the dialogue orchestrator."""

import asyncio

import pytest

from tests.fakes import BlockingGeneration, BrokenKnowledgeStore, GatedConversationStore, RecordingGeneration
from tyrebot.pipeline.context_builder import NO_KNOWLEDGE_CONTEXT
from tyrebot.pipeline.errors import InputError, ServiceError
from tyrebot.pipeline.matcher import QueryMatcher
from tyrebot.pipeline.orchestrator import DialogueOrchestrator, TurnState


def _orchestrator(knowledge_store, conversation_store, generation):
    return DialogueOrchestrator(
        matcher=QueryMatcher(knowledge_store),
        generation_service=generation,
        conversation_store=conversation_store,
    )


@pytest.mark.asyncio
async def test_grounded_turn_is_persisted_and_cites_the_match(orchestrator, generation, conversation_store, warranty_entry):
    result = await orchestrator.handle_turn("What is the warranty on CEAT tyres?", session_id="s1")

    assert result.state is TurnState.DELIVERED
    assert result.response_text == generation.reply
    assert result.session_id == "s1"
    assert [source.id for source in result.sources] == [warranty_entry.id]
    assert "[1] Category: Warranty" in generation.calls[0]["system_prompt"]

    stored = conversation_store.query(session_id="s1")
    assert len(stored) == 1
    assert stored[0].id == result.conversation_id
    assert stored[0].matched_kb_id == warranty_entry.id
    assert stored[0].confidence_score == pytest.approx(0.8)
    assert stored[0].bot_response == generation.reply
    assert stored[0].feedback is None


@pytest.mark.asyncio
async def test_ungrounded_turn_uses_sentinel_and_defaults_session(orchestrator, generation, conversation_store):
    result = await orchestrator.handle_turn("hello")

    assert result.session_id == "anonymous"
    assert result.sources == []
    assert result.matched_entry_id is None
    assert NO_KNOWLEDGE_CONTEXT in generation.calls[0]["system_prompt"]

    stored = conversation_store.query(session_id="anonymous")
    assert len(stored) == 1
    assert stored[0].matched_kb_id is None


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [None, "", "   \n"])
async def test_missing_message_is_rejected_without_side_effects(orchestrator, generation, conversation_store, message):
    with pytest.raises(InputError) as excinfo:
        await orchestrator.handle_turn(message, session_id="s1")

    assert excinfo.value.user_message == "Message is required"
    assert generation.calls == []
    assert conversation_store.query() == []


@pytest.mark.asyncio
async def test_malformed_history_is_rejected(orchestrator, generation):
    with pytest.raises(InputError):
        await orchestrator.handle_turn("hi", conversation_history=[{"role": "system", "content": "x"}])

    assert generation.calls == []


@pytest.mark.asyncio
async def test_generation_failure_persists_nothing(knowledge_store, conversation_store):
    generation = RecordingGeneration(error=RuntimeError("provider down"))
    orchestrator = _orchestrator(knowledge_store, conversation_store, generation)

    with pytest.raises(ServiceError) as excinfo:
        await orchestrator.handle_turn("hello", session_id="s1")

    assert "provider down" in excinfo.value.detail
    assert conversation_store.query() == []


@pytest.mark.asyncio
async def test_sources_are_capped_at_two(orchestrator, knowledge_store):
    for index in range(5):
        knowledge_store.add_entry(category="Maintenance", question=f"Pressure tip {index}", answer="Check monthly.")

    result = await orchestrator.handle_turn("pressure")

    assert len(result.sources) == 2


@pytest.mark.asyncio
async def test_history_is_forwarded_in_order_with_message_last(orchestrator, generation):
    history = [
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hello! How can I help?"},
    ]

    await orchestrator.handle_turn("Do you sell truck tyres?", conversation_history=history)

    assert generation.calls[0]["messages"] == history + [{"role": "user", "content": "Do you sell truck tyres?"}]
    assert generation.calls[0]["max_tokens"] == 1024


@pytest.mark.asyncio
async def test_matcher_fault_only_removes_grounding(conversation_store, generation):
    orchestrator = DialogueOrchestrator(
        matcher=QueryMatcher(BrokenKnowledgeStore()),
        generation_service=generation,
        conversation_store=conversation_store,
    )

    result = await orchestrator.handle_turn("warranty", session_id="s1")

    assert result.sources == []
    assert NO_KNOWLEDGE_CONTEXT in generation.calls[0]["system_prompt"]
    assert len(conversation_store.query(session_id="s1")) == 1


@pytest.mark.asyncio
async def test_concurrent_turns_are_independent(orchestrator, conversation_store):
    results = await asyncio.gather(
        orchestrator.handle_turn("first question", session_id="a"),
        orchestrator.handle_turn("second question", session_id="b"),
    )

    assert results[0].conversation_id != results[1].conversation_id
    assert [turn.user_message for turn in conversation_store.query(session_id="a")] == ["first question"]
    assert [turn.user_message for turn in conversation_store.query(session_id="b")] == ["second question"]


@pytest.mark.asyncio
async def test_cancelled_turn_leaves_no_trace(knowledge_store, conversation_store):
    generation = BlockingGeneration()
    orchestrator = _orchestrator(knowledge_store, conversation_store, generation)

    task = asyncio.create_task(orchestrator.handle_turn("hello", session_id="s1"))
    await asyncio.wait_for(generation.started.wait(), timeout=5)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert conversation_store.query() == []


@pytest.mark.asyncio
async def test_turn_cancelled_during_persistence_keeps_its_row(knowledge_store, conversation_store, generation):
    gated = GatedConversationStore(conversation_store)
    orchestrator = _orchestrator(knowledge_store, gated, generation)

    task = asyncio.create_task(orchestrator.handle_turn("hello", session_id="s1"))
    assert await asyncio.to_thread(gated.entered.wait, 5)
    task.cancel()
    gated.release.set()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert await asyncio.to_thread(gated.finished.wait, 5)
    assert [turn.user_message for turn in conversation_store.query(session_id="s1")] == ["hello"]


@pytest.mark.asyncio
async def test_feedback_is_recorded(orchestrator, conversation_store):
    result = await orchestrator.handle_turn("hello", session_id="s1")

    assert await orchestrator.set_feedback(result.conversation_id, "helpful") is True
    assert conversation_store.get(result.conversation_id).feedback == "helpful"


@pytest.mark.asyncio
async def test_feedback_for_unknown_turn_still_succeeds(orchestrator, conversation_store):
    assert await orchestrator.set_feedback(999, "helpful") is True
    assert conversation_store.query() == []
