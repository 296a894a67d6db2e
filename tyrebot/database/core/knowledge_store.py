"""
Knowledge store: transactional operations over the curated knowledge base.

Every public method is wrapped with `@transactional`, which opens a session
from the store's `Database`, commits on success and rolls back on failure.
The dialogue pipeline only ever calls `search`; everything else serves the
knowledge-administration surface.
"""

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from tyrebot.database.config.connection_engine import Database
from tyrebot.database.daos.knowledge_base_dao import KnowledgeBaseDao
from tyrebot.database.daos.update_log_dao import UpdateLogDao
from tyrebot.database.entities.knowledge_base import KnowledgeEntry
from tyrebot.database.entities.update_logs import UpdateLog
from tyrebot.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

CONTENT_FIELDS = ("category", "question", "answer", "keywords", "is_active")


class KnowledgeStore:
    """
    Durable mapping from entry id to versioned knowledge entries.

    Parameters
    ----------
    database : Database
        Owner of the engine and session factory.
    """

    def __init__(self, database: Database):
        self.database = database
        self.knowledge_dao = KnowledgeBaseDao()
        self.update_log_dao = UpdateLogDao()

    @transactional
    def search(self, query: str, limit: int = 5, session: Session = None) -> list[KnowledgeEntry]:
        """Ranked search over active entries (see `KnowledgeBaseDao.searchActiveEntries`)."""
        return self.knowledge_dao.searchActiveEntries(session, query, limit)

    @transactional
    def list_entries(
        self,
        category: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 50,
        session: Session = None,
    ) -> dict:
        """
        Paginated admin listing.

        Returns
        -------
        dict
            ``{'data': [KnowledgeEntry, ...], 'total': int, 'page': int, 'limit': int}``
        """
        offset = (page - 1) * limit
        entries = self.knowledge_dao.fetchEntries(session, category=category, search=search, offset=offset, limit=limit)
        total = self.knowledge_dao.countEntries(session, category=category, search=search)
        return {"data": entries, "total": total, "page": page, "limit": limit}

    @transactional
    def get_entry(self, entry_id: int, session: Session = None) -> KnowledgeEntry | None:
        return self.knowledge_dao.fetchEntryById(session, entry_id)

    @transactional
    def add_entry(
        self,
        category: str,
        question: str,
        answer: str,
        keywords: Iterable[str] = (),
        created_by: str | None = None,
        session: Session = None,
    ) -> KnowledgeEntry:
        """
        Create one entry (version 1, active) and record it in the update log.
        """
        entry = KnowledgeEntry(
            category=category,
            question=question,
            answer=answer,
            keywords=list(keywords),
            created_by=created_by,
        )
        self.knowledge_dao.createEntry(session, entry)
        self.update_log_dao.createLog(
            session,
            UpdateLog(
                update_type="knowledge_base",
                updated_by=created_by,
                changes_count=1,
                update_notes="Added new entry",
            ),
        )
        logger.info("Knowledge entry %s added by %s", entry.id, created_by)
        return entry

    @transactional
    def update_entry(self, entry_id: int, changes: dict, session: Session = None) -> KnowledgeEntry | None:
        """
        Edit an entry's content and bump its version.

        Unknown keys and null values in ``changes`` are ignored, so a null leaves
        that field unchanged. Returns None when the id does not exist.
        """
        accepted = {field: value for field, value in changes.items() if field in CONTENT_FIELDS and value is not None}
        entry = self.knowledge_dao.updateEntry(session, entry_id, accepted)
        if entry is not None:
            logger.info("Knowledge entry %s updated to version %s", entry.id, entry.version)
        return entry

    @transactional
    def delete_entry(self, entry_id: int, session: Session = None) -> bool:
        return self.knowledge_dao.deleteEntry(session, entry_id)

    @transactional
    def bulk_insert(
        self,
        rows: Iterable[dict],
        uploaded_by: str | None,
        file_name: str | None = None,
        session: Session = None,
    ) -> int:
        """
        Insert every row of a parsed upload and write one ``bulk_upload`` log record.

        ``rows`` is consumed lazily. The whole batch shares one transaction, so a
        failure on any row leaves the knowledge base untouched.

        Returns
        -------
        int
            Number of entries inserted.
        """
        insert_count = 0
        for row in rows:
            self.knowledge_dao.createEntry(
                session,
                KnowledgeEntry(
                    category=row["category"],
                    question=row["question"],
                    answer=row["answer"],
                    keywords=row.get("keywords", []),
                    created_by=uploaded_by,
                ),
            )
            insert_count += 1

        self.update_log_dao.createLog(
            session,
            UpdateLog(
                update_type="bulk_upload",
                updated_by=uploaded_by,
                changes_count=insert_count,
                file_name=file_name,
                update_notes="CSV bulk upload",
            ),
        )
        logger.info("Bulk upload %r inserted %d entries", file_name, insert_count)
        return insert_count

    @transactional
    def categories(self, session: Session = None) -> list[dict]:
        """Distinct categories over active entries with counts."""
        return self.knowledge_dao.fetchCategories(session)

    @transactional
    def update_logs(self, session: Session = None) -> list[UpdateLog]:
        return self.update_log_dao.fetchLogs(session)
