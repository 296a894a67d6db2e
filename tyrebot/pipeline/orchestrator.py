"""
Dialogue orchestrator: drives one customer turn through matching, context
assembly, generation and persistence, and packages the reply.

Turn lifecycle
--------------
``RECEIVED -> GROUNDED -> GENERATED -> PERSISTED -> DELIVERED``; ``FAILED`` is
reachable from every non-terminal state.

- RECEIVED: the message must be a non-blank string and the history a list of
  ``{role, content}`` pairs, otherwise ``InputError`` and nothing else happens.
- GROUNDED: matching is best-effort; a matcher fault only removes grounding.
- GENERATED: any generation fault is a ``ServiceError``; nothing is persisted.
- PERSISTED: exactly one row is appended for the turn.
- DELIVERED: the reply, the session id and at most ``sources_limit`` of the
  matched entries are returned.

Turns are independent: no state is shared between calls other than the
injected collaborators. Blocking store calls run in worker threads so the
event loop stays free while the generation call, the only suspension point
that honours cancellation, is awaited. A turn cancelled before persistence
starts leaves no trace in the conversation log. Once the insert has started
it is shielded and runs to completion, so a turn cancelled during persistence
still leaves its row even though the caller sees the cancellation.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError

from tyrebot.database.core.conversation_store import ConversationStore
from tyrebot.database.entities.knowledge_base import KnowledgeEntry
from tyrebot.pipeline.context_builder import build_context
from tyrebot.pipeline.errors import InputError, PersistenceError, ServiceError, TyrebotError
from tyrebot.pipeline.generation import GenerationService
from tyrebot.pipeline.matcher import QueryMatcher
from tyrebot.pipeline.prompts import build_system_prompt

logger = logging.getLogger(__name__)

ANONYMOUS_SESSION = "anonymous"
# Fixed until a rank/coverage based policy is agreed on
DEFAULT_CONFIDENCE_SCORE = 0.8
MAX_SOURCES = 2
HISTORY_ROLES = ("user", "assistant")


class TurnState(str, Enum):
    RECEIVED = "received"
    GROUNDED = "grounded"
    GENERATED = "generated"
    PERSISTED = "persisted"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass
class TurnResult:
    response_text: str
    session_id: str
    conversation_id: int
    matched_entry_id: int | None
    sources: list[KnowledgeEntry] = field(default_factory=list)
    state: TurnState = TurnState.DELIVERED


class DialogueOrchestrator:
    """
    Parameters
    ----------
    matcher : QueryMatcher
        Ranks knowledge entries for the message.
    generation_service : GenerationService
        Produces the reply text.
    conversation_store : ConversationStore
        Receives one row per delivered turn.
    max_tokens : int
        Output-length cap passed to the generation service.
    sources_limit : int
        Number of matched entries exposed as citations.
    """

    def __init__(
        self,
        matcher: QueryMatcher,
        generation_service: GenerationService,
        conversation_store: ConversationStore,
        max_tokens: int = 1024,
        sources_limit: int = MAX_SOURCES,
        confidence_score: float = DEFAULT_CONFIDENCE_SCORE,
    ):
        self.matcher = matcher
        self.generation_service = generation_service
        self.conversation_store = conversation_store
        self.max_tokens = max_tokens
        self.sources_limit = sources_limit
        self.confidence_score = confidence_score

    async def handle_turn(
        self,
        message,
        session_id: str | None = None,
        conversation_history: Sequence[dict] | None = None,
    ) -> TurnResult:
        state = TurnState.RECEIVED
        session_id = session_id or ANONYMOUS_SESSION
        try:
            history = self._validated_history(message, conversation_history)

            entries = await asyncio.to_thread(self.matcher.search, message)
            context = build_context(entries)
            state = self._advance(state, TurnState.GROUNDED, session_id)

            reply = await self._generate(build_system_prompt(context), history + [{"role": "user", "content": message}])
            state = self._advance(state, TurnState.GENERATED, session_id)

            matched_entry_id = entries[0].id if entries else None
            stored = await asyncio.shield(
                asyncio.to_thread(self._persist, session_id, message, reply, matched_entry_id)
            )
            state = self._advance(state, TurnState.PERSISTED, session_id)
        except TyrebotError as error:
            logger.warning("Turn for session %s failed in state %s: %s", session_id, state.value, error)
            raise
        except asyncio.CancelledError:
            logger.info("Turn for session %s cancelled in state %s", session_id, state.value)
            raise

        state = self._advance(state, TurnState.DELIVERED, session_id)
        logger.info(
            "Turn %s delivered (session=%s, matches=%d, matched_entry=%s)",
            stored.id, session_id, len(entries), matched_entry_id,
        )
        return TurnResult(
            response_text=reply,
            session_id=session_id,
            conversation_id=stored.id,
            matched_entry_id=matched_entry_id,
            sources=list(entries[: self.sources_limit]),
            state=state,
        )

    async def set_feedback(self, conversation_id: int, feedback: str | None) -> bool:
        """
        Record feedback on a stored turn.

        Reports success whenever the update statement executes, including when
        no turn has that id (the store logs the miss).
        """
        try:
            await asyncio.to_thread(self.conversation_store.update_feedback, conversation_id, feedback)
        except SQLAlchemyError as error:
            raise PersistenceError(f"Failed to save feedback: {error}") from error
        return True

    @staticmethod
    def _advance(current: TurnState, target: TurnState, session_id: str) -> TurnState:
        logger.debug("Turn for session %s: %s -> %s", session_id, current.value, target.value)
        return target

    @staticmethod
    def _validated_history(message, conversation_history) -> list[dict]:
        if not isinstance(message, str) or not message.strip():
            raise InputError("Message is required")
        if conversation_history is None:
            return []
        if not isinstance(conversation_history, (list, tuple)):
            raise InputError("conversationHistory must be a list")
        history = []
        for item in conversation_history:
            if not isinstance(item, dict) or item.get("role") not in HISTORY_ROLES or not isinstance(item.get("content"), str):
                raise InputError("conversationHistory items must be {role: user|assistant, content: string}")
            history.append({"role": item["role"], "content": item["content"]})
        return history

    async def _generate(self, system_prompt: str, messages: list[dict]) -> str:
        try:
            return await self.generation_service.generate(system_prompt, messages, self.max_tokens)
        except ServiceError:
            raise
        except Exception as error:
            raise ServiceError(f"Generation failed: {error}") from error

    def _persist(self, session_id: str, message: str, reply: str, matched_entry_id: int | None):
        try:
            return self.conversation_store.append(
                session_id=session_id,
                user_message=message,
                bot_response=reply,
                matched_kb_id=matched_entry_id,
                confidence_score=self.confidence_score,
            )
        except SQLAlchemyError as error:
            raise PersistenceError(f"Failed to store conversation: {error}") from error
