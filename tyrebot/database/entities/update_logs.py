"""
UpdateLog ORM Model
===================

Audit record written whenever the knowledge base is changed through the admin
surface (single additions and bulk CSV uploads).
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, TEXT, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column

from tyrebot.database.config.connection_engine import declarativeBase


class UpdateLog(declarativeBase):
    """
    ORM model for the `update_logs` table.

    Attributes
    ----------
    update_type : str
        ``"knowledge_base"`` for single edits, ``"bulk_upload"`` for CSV batches.
    updated_by : str
        Admin username.
    changes_count : int
        Number of entries written by the operation.
    file_name : str | None
        Original name of the uploaded file, for bulk uploads.
    update_notes : str | None
        Human-readable note.
    """

    __tablename__ = "update_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_type: Mapped[str] = mapped_column(VARCHAR(64), nullable=False)
    updated_by: Mapped[str] = mapped_column(VARCHAR(255), nullable=True)
    changes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    file_name: Mapped[str] = mapped_column(VARCHAR(255), nullable=True)
    update_notes: Mapped[str] = mapped_column(TEXT, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __init__(
        self,
        update_type: str,
        updated_by: str | None,
        changes_count: int,
        file_name: str | None = None,
        update_notes: str | None = None,
    ):
        self.update_type = update_type
        self.updated_by = updated_by
        self.changes_count = changes_count
        self.file_name = file_name
        self.update_notes = update_notes
        self.created_at = datetime.now(timezone.utc)
