"""
Conversation DAO

Purpose
-------
Thin data-access layer for the `ConversationTurn` ORM entity:
- Append turns
- Single-field feedback updates by id
- Time-ranged reads and aggregates used by analytics

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller.
- Time ranges are inclusive on both bounds; a missing bound leaves that side open.
- `updateFeedback` issues a single UPDATE statement and reports the matched
  row count; it never creates rows.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from tyrebot.database.entities.conversations import ConversationTurn

logger = logging.getLogger(__name__)


def _in_range(statement, start: datetime | None, end: datetime | None):
    if start is not None:
        statement = statement.where(ConversationTurn.created_at >= start)
    if end is not None:
        statement = statement.where(ConversationTurn.created_at <= end)
    return statement


class ConversationDao:
    """
    Data Access Object (DAO) for managing ConversationTurn entities.
    """

    def createTurn(self, session: Session, turn: ConversationTurn) -> ConversationTurn:
        """
        Stage a new turn and flush it so its id is populated.

        Raises
        ------
        Exception
            If the insert fails.
        """
        try:
            session.add(turn)
            session.flush()
            return turn
        except Exception:
            logger.error("Error in ConversationDao.createTurn (session_id=%s)", turn.session_id)
            raise

    def fetchTurnById(self, session: Session, turn_id: int) -> ConversationTurn | None:
        try:
            return session.get(ConversationTurn, turn_id)
        except Exception:
            logger.error("Error in ConversationDao.fetchTurnById (id=%s)", turn_id)
            raise

    def updateFeedback(self, session: Session, turn_id: int, feedback: str | None) -> int:
        """
        Set the feedback label of one turn.

        Returns
        -------
        int
            Number of rows matched (0 when the id does not exist).
        """
        try:
            result = session.execute(
                update(ConversationTurn)
                .where(ConversationTurn.id == turn_id)
                .values(feedback=feedback)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount
        except Exception:
            logger.error("Error in ConversationDao.updateFeedback (id=%s)", turn_id)
            raise

    def fetchTurns(
        self,
        session: Session,
        start: datetime | None = None,
        end: datetime | None = None,
        session_id: str | None = None,
        feedback: str | None = None,
    ) -> list[ConversationTurn]:
        """
        Fetch turns in a time range, oldest first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        start, end : datetime | None
            Inclusive bounds on ``created_at``.
        session_id : str | None
            Restrict to one conversation.
        feedback : str | None
            Restrict to one feedback label.
        """
        try:
            statement = _in_range(select(ConversationTurn), start, end)
            if session_id is not None:
                statement = statement.where(ConversationTurn.session_id == session_id)
            if feedback is not None:
                statement = statement.where(ConversationTurn.feedback == feedback)
            statement = statement.order_by(ConversationTurn.created_at, ConversationTurn.id)
            return list(session.scalars(statement).all())
        except Exception:
            logger.error("Error in ConversationDao.fetchTurns")
            raise

    def countTurns(self, session: Session, start: datetime | None, end: datetime | None) -> int:
        try:
            return session.scalar(_in_range(select(func.count(ConversationTurn.id)), start, end)) or 0
        except Exception:
            logger.error("Error in ConversationDao.countTurns")
            raise

    def fetchFeedbackStats(self, session: Session, start: datetime | None, end: datetime | None) -> list[dict]:
        """Turn counts grouped by non-null feedback label, most frequent first."""
        try:
            count = func.count(ConversationTurn.id)
            statement = _in_range(
                select(ConversationTurn.feedback, count).where(ConversationTurn.feedback.is_not(None)),
                start,
                end,
            )
            statement = statement.group_by(ConversationTurn.feedback).order_by(count.desc(), ConversationTurn.feedback)
            return [{"feedback": feedback, "count": total} for feedback, total in session.execute(statement)]
        except Exception:
            logger.error("Error in ConversationDao.fetchFeedbackStats")
            raise

    def fetchTopQuestions(
        self, session: Session, start: datetime | None, end: datetime | None, limit: int
    ) -> list[dict]:
        """Most frequent verbatim user messages; ties ordered by message text."""
        try:
            count = func.count(ConversationTurn.id)
            statement = _in_range(select(ConversationTurn.user_message, count), start, end)
            statement = (
                statement.group_by(ConversationTurn.user_message)
                .order_by(count.desc(), ConversationTurn.user_message)
                .limit(limit)
            )
            return [{"user_message": message, "count": total} for message, total in session.execute(statement)]
        except Exception:
            logger.error("Error in ConversationDao.fetchTopQuestions")
            raise
