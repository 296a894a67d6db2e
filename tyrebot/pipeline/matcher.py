"""
Query matcher: best-effort ranking of knowledge entries for a customer query.
"""

import logging

from tyrebot.database.core.knowledge_store import KnowledgeStore
from tyrebot.database.entities.knowledge_base import KnowledgeEntry

logger = logging.getLogger(__name__)

MAX_MATCHES = 5


class QueryMatcher:
    """
    Ranks active knowledge entries against free text.

    Rank order is question substring, then exact keyword, then answer-only
    substring (see `KnowledgeBaseDao.searchActiveEntries`). At most
    ``limit`` entries are returned.

    Matching never fails a turn: any lookup fault is logged and reported as
    an empty result.
    """

    def __init__(self, knowledge_store: KnowledgeStore, limit: int = MAX_MATCHES):
        self.knowledge_store = knowledge_store
        self.limit = limit

    def search(self, query: str) -> list[KnowledgeEntry]:
        if not isinstance(query, str) or not query.strip():
            return []
        try:
            entries = self.knowledge_store.search(query, limit=self.limit)
        except Exception:
            logger.exception("Knowledge base search failed; continuing without grounding")
            return []
        return [entry for entry in entries if entry.is_active][: self.limit]
