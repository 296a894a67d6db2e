"""
Conversation store: append-mostly log of chat turns.

Append is the only creation path and there is no way to edit or delete a
turn's message text; the feedback label is the only mutable field.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from tyrebot.database.config.connection_engine import Database
from tyrebot.database.daos.conversation_dao import ConversationDao
from tyrebot.database.entities.conversations import ConversationTurn
from tyrebot.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    Transactional access to persisted conversation turns.

    Parameters
    ----------
    database : Database
        Owner of the engine and session factory.
    """

    def __init__(self, database: Database):
        self.database = database
        self.conversation_dao = ConversationDao()

    @transactional
    def append(
        self,
        session_id: str,
        user_message: str,
        bot_response: str,
        matched_kb_id: int | None,
        confidence_score: float,
        created_at: datetime | None = None,
        session: Session = None,
    ) -> ConversationTurn:
        """
        Persist one turn as a single-row insert.

        Returns
        -------
        ConversationTurn
            The stored turn with its generated id.
        """
        turn = ConversationTurn(
            session_id=session_id,
            user_message=user_message,
            bot_response=bot_response,
            matched_kb_id=matched_kb_id,
            confidence_score=confidence_score,
            created_at=created_at,
        )
        return self.conversation_dao.createTurn(session, turn)

    @transactional
    def update_feedback(self, turn_id: int, feedback: str | None, session: Session = None) -> bool:
        """
        Set the feedback label of one turn.

        Returns
        -------
        bool
            True when a row with that id existed.
        """
        matched = self.conversation_dao.updateFeedback(session, turn_id, feedback)
        if not matched:
            logger.warning("Feedback for unknown conversation id %s ignored", turn_id)
        return matched > 0

    @transactional
    def get(self, turn_id: int, session: Session = None) -> ConversationTurn | None:
        return self.conversation_dao.fetchTurnById(session, turn_id)

    @transactional
    def query(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        session_id: str | None = None,
        feedback: str | None = None,
        session: Session = None,
    ) -> list[ConversationTurn]:
        """Turns in an inclusive time range, optionally filtered, oldest first."""
        return self.conversation_dao.fetchTurns(
            session, start=start, end=end, session_id=session_id, feedback=feedback
        )
