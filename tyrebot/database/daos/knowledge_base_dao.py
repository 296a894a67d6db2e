"""
Knowledge Base DAO

Purpose
-------
Data-access layer for the `KnowledgeEntry` ORM entity:
- Ranked keyword/substring search over active entries
- Paginated admin listing with category and text filters
- Create, update (version bump), delete
- Category aggregate over active entries

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller (no session
  creation inside the DAO). Transaction boundaries live in the store layer.
- Substring predicates use `icontains(..., autoescape=True)` so `%` and `_` in a
  customer query are matched literally.

Error Handling
--------------
- Methods log the failure and re-raise; callers decide the error policy.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session

from tyrebot.database.entities.knowledge_base import KnowledgeEntry, KnowledgeKeyword

logger = logging.getLogger(__name__)

QUESTION_MATCH_RANK = 1
KEYWORD_MATCH_RANK = 2
ANSWER_MATCH_RANK = 3


class KnowledgeBaseDao:
    """
    Data Access Object (DAO) for managing KnowledgeEntry entities.
    """

    def searchActiveEntries(self, session: Session, query: str, limit: int) -> list[KnowledgeEntry]:
        """
        Rank active entries against a free-text query.

        An entry qualifies when the query is a case-insensitive substring of its
        question or answer, or when the query equals one of its keywords after
        both are lower-cased by the database. Rank 1 is a question hit, rank 2 a keyword hit,
        rank 3 an answer-only hit; an entry takes its best rank. Ties are broken
        by most recently updated first, then by highest id.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        query : str
            Raw customer query.
        limit : int
            Maximum number of entries returned.

        Returns
        -------
        list[KnowledgeEntry]
            Matching entries in rank order.
        """
        try:
            question_hit = KnowledgeEntry.question.icontains(query, autoescape=True)
            answer_hit = KnowledgeEntry.answer.icontains(query, autoescape=True)
            keyword_hit = (
                select(KnowledgeKeyword.id)
                .where(KnowledgeKeyword.entry_id == KnowledgeEntry.id)
                .where(func.lower(KnowledgeKeyword.keyword) == func.lower(query))
                .exists()
            )
            rank = case(
                (question_hit, QUESTION_MATCH_RANK),
                (keyword_hit, KEYWORD_MATCH_RANK),
                else_=ANSWER_MATCH_RANK,
            )
            statement = (
                select(KnowledgeEntry)
                .where(KnowledgeEntry.is_active.is_(True))
                .where(or_(question_hit, answer_hit, keyword_hit))
                .order_by(rank, KnowledgeEntry.updated_at.desc(), KnowledgeEntry.id.desc())
                .limit(limit)
            )
            return list(session.scalars(statement).all())
        except Exception:
            logger.error("Error in KnowledgeBaseDao.searchActiveEntries (query=%r)", query)
            raise

    def _filtered(self, statement, category: str | None, search: str | None):
        if category:
            statement = statement.where(KnowledgeEntry.category == category)
        if search:
            statement = statement.where(
                or_(
                    KnowledgeEntry.question.icontains(search, autoescape=True),
                    KnowledgeEntry.answer.icontains(search, autoescape=True),
                )
            )
        return statement

    def fetchEntries(
        self,
        session: Session,
        category: str | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[KnowledgeEntry]:
        """
        Fetch entries for the admin listing (active and inactive), newest edit first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        category : str | None
            Exact category filter.
        search : str | None
            Case-insensitive substring filter over question and answer.
        offset, limit : int
            Pagination window.
        """
        try:
            statement = self._filtered(select(KnowledgeEntry), category, search)
            statement = (
                statement.order_by(KnowledgeEntry.updated_at.desc(), KnowledgeEntry.id.desc())
                .offset(offset)
                .limit(limit)
            )
            return list(session.scalars(statement).all())
        except Exception:
            logger.error("Error in KnowledgeBaseDao.fetchEntries")
            raise

    def countEntries(self, session: Session, category: str | None = None, search: str | None = None) -> int:
        """Count entries matching the same filters as `fetchEntries`."""
        try:
            statement = self._filtered(select(func.count(KnowledgeEntry.id)), category, search)
            return session.scalar(statement) or 0
        except Exception:
            logger.error("Error in KnowledgeBaseDao.countEntries")
            raise

    def fetchEntryById(self, session: Session, entry_id: int) -> KnowledgeEntry | None:
        try:
            return session.get(KnowledgeEntry, entry_id)
        except Exception:
            logger.error("Error in KnowledgeBaseDao.fetchEntryById (id=%s)", entry_id)
            raise

    def createEntry(self, session: Session, entry: KnowledgeEntry) -> KnowledgeEntry:
        """
        Stage a new entry and flush it so its id is populated.

        Raises
        ------
        Exception
            If the insert fails.
        """
        try:
            session.add(entry)
            session.flush()
            return entry
        except Exception:
            logger.error("Error in KnowledgeBaseDao.createEntry")
            raise

    def updateEntry(self, session: Session, entry_id: int, changes: dict) -> KnowledgeEntry | None:
        """
        Apply content changes to an entry and bump its version.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        entry_id : int
            Target entry.
        changes : dict
            Any of ``category``, ``question``, ``answer``, ``keywords``, ``is_active``.

        Returns
        -------
        KnowledgeEntry | None
            The updated entry, or None when no entry has that id.
        """
        try:
            entry = session.get(KnowledgeEntry, entry_id)
            if entry is None:
                return None
            for field, value in changes.items():
                setattr(entry, field, value)
            entry.version = entry.version + 1
            entry.updated_at = datetime.now(timezone.utc)
            session.flush()
            return entry
        except Exception:
            logger.error("Error in KnowledgeBaseDao.updateEntry (id=%s)", entry_id)
            raise

    def deleteEntry(self, session: Session, entry_id: int) -> bool:
        """Delete an entry. Returns False when there was nothing to delete."""
        try:
            entry = session.get(KnowledgeEntry, entry_id)
            if entry is None:
                return False
            session.delete(entry)
            return True
        except Exception:
            logger.error("Error in KnowledgeBaseDao.deleteEntry (id=%s)", entry_id)
            raise

    def fetchCategories(self, session: Session) -> list[dict]:
        """Distinct categories over active entries with their counts, ordered by category."""
        try:
            statement = (
                select(KnowledgeEntry.category, func.count(KnowledgeEntry.id))
                .where(KnowledgeEntry.is_active.is_(True))
                .group_by(KnowledgeEntry.category)
                .order_by(KnowledgeEntry.category)
            )
            return [{"category": category, "count": count} for category, count in session.execute(statement)]
        except Exception:
            logger.error("Error in KnowledgeBaseDao.fetchCategories")
            raise
