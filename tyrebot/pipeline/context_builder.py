"""
Grounding context rendering.

The output is a pure function of the ranked entries: same input, same bytes.
"""

from typing import Sequence

from tyrebot.database.entities.knowledge_base import KnowledgeEntry

NO_KNOWLEDGE_CONTEXT = "No specific information found in the knowledge base."
ENTRY_SEPARATOR = "\n\n"


def render_entry(position: int, entry: KnowledgeEntry) -> str:
    return f"[{position}] Category: {entry.category}\nQ: {entry.question}\nA: {entry.answer}"


def build_context(entries: Sequence[KnowledgeEntry]) -> str:
    """
    Render ranked entries as enumerated blocks in input order.

    Returns ``NO_KNOWLEDGE_CONTEXT`` when there is nothing to render.
    """
    if not entries:
        return NO_KNOWLEDGE_CONTEXT
    return ENTRY_SEPARATOR.join(render_entry(index, entry) for index, entry in enumerate(entries, start=1))
