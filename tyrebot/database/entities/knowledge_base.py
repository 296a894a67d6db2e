"""
KnowledgeEntry ORM Model
========================

The ``KnowledgeEntry`` ORM model represents one curated question/answer record
stored in the ``knowledge_base`` table. Keyword tags live in the companion
``knowledge_keyword`` table so that exact keyword membership can be tested in SQL
on any backend.

Key features
~~~~~~~~~~~~
- Integer primary key (``id``)
- ``category``, ``question`` and ``answer`` text
- ``is_active`` flag: inactive entries are hidden from matching, not deleted
- ``version`` starting at 1 and bumped on every content edit
- Audit columns: ``created_by``, ``created_at``, ``updated_at`` (UTC, tz-aware)
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, TEXT, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tyrebot.database.config.connection_engine import declarativeBase


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class KnowledgeKeyword(declarativeBase):
    """One keyword tag of a knowledge entry. Stored as entered; lower-cased at match time."""

    __tablename__ = "knowledge_keyword"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("knowledge_base.id", ondelete="CASCADE"), nullable=False, index=True
    )
    keyword: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)

    def __init__(self, keyword: str):
        self.keyword = keyword


class KnowledgeEntry(declarativeBase):
    """
    ORM model for the `knowledge_base` table.

    Attributes
    ----------
    id : int
        Primary key.
    category : str
        Product/topic category (e.g., "Warranty", "Car & SUV tyres").
    question : str
        Canonical customer question.
    answer : str
        Curated answer text used for grounding.
    keywords : list[str]
        Keyword tags (see ``keyword_rows``).
    is_active : bool
        Whether the entry takes part in matching.
    version : int
        Content version, 1 on creation.
    created_by : str | None
        Username of the admin who created the entry.
    created_at, updated_at : datetime
        Audit timestamps (UTC).
    """

    __tablename__ = "knowledge_base"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, index=True)
    question: Mapped[str] = mapped_column(TEXT, nullable=False)
    answer: Mapped[str] = mapped_column(TEXT, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_by: Mapped[str] = mapped_column(VARCHAR(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    keyword_rows: Mapped[list[KnowledgeKeyword]] = relationship(
        KnowledgeKeyword,
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=KnowledgeKeyword.id,
    )

    def __init__(
        self,
        category: str,
        question: str,
        answer: str,
        keywords=None,
        created_by: str | None = None,
        is_active: bool = True,
        created_at: datetime | None = None,
    ):
        timestamp = created_at or utc_now()
        self.category = category
        self.question = question
        self.answer = answer
        self.keywords = keywords or []
        self.created_by = created_by
        self.is_active = is_active
        self.version = 1
        self.created_at = timestamp
        self.updated_at = timestamp

    @property
    def keywords(self) -> list[str]:
        return [row.keyword for row in self.keyword_rows]

    @keywords.setter
    def keywords(self, values) -> None:
        self.keyword_rows = [KnowledgeKeyword(value) for value in values]

    def __str__(self) -> str:
        return f"KnowledgeEntry: id:{self.id}, category: {self.category}, version: {self.version}"
