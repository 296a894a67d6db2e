"""
Read-only analytics over the conversation log.

Nothing here is cached; every call recomputes from the store.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from tyrebot.database.config.connection_engine import Database
from tyrebot.database.daos.conversation_dao import ConversationDao
from tyrebot.database.helpers.transactionManagement import transactional

TOP_QUESTIONS_LIMIT = 10
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AnalyticsAggregator:
    """
    Time-ranged summaries of persisted turns.

    Both bounds are inclusive. A missing ``start`` defaults to the Unix epoch
    and a missing ``end`` to the current time.
    """

    def __init__(self, database: Database, top_questions_limit: int = TOP_QUESTIONS_LIMIT):
        self.database = database
        self.top_questions_limit = top_questions_limit
        self.conversation_dao = ConversationDao()

    @transactional
    def summarize(self, start: datetime | None = None, end: datetime | None = None, session: Session = None) -> dict:
        """
        Returns
        -------
        dict
            ``{'totalConversations': int,
               'feedbackStats': [{'feedback', 'count'}, ...],
               'topQuestions': [{'userMessage', 'count'}, ...]}``
        """
        start = as_utc(start) or EPOCH
        end = as_utc(end) or datetime.now(timezone.utc)
        top_questions = self.conversation_dao.fetchTopQuestions(session, start, end, self.top_questions_limit)
        return {
            "totalConversations": self.conversation_dao.countTurns(session, start, end),
            "feedbackStats": self.conversation_dao.fetchFeedbackStats(session, start, end),
            "topQuestions": [
                {"userMessage": row["user_message"], "count": row["count"]} for row in top_questions
            ],
        }
