"""
ConversationTurn ORM Model
==========================

The ``ConversationTurn`` ORM model represents one persisted chat exchange (a user
message paired with the generated reply) stored in the ``conversations`` table.

Key features
~~~~~~~~~~~~
- Integer primary key (``id``), used as ``conversationId`` by the feedback API
- Opaque client-supplied ``session_id`` grouping turns into a conversation
- ``matched_kb_id``: id of the top-ranked knowledge entry, if any
- ``confidence_score`` in [0, 1]
- ``feedback``: the only field that changes after creation
- Timezone-aware ``created_at`` (UTC)

Integration notes
~~~~~~~~~~~~~~~~~
- Rows are created only by the dialogue orchestrator and updated only by the
  feedback operation. ``matched_kb_id`` is a plain column (no foreign key) so that
  deleting a knowledge entry never touches the conversation log.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Integer, TEXT, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column

from tyrebot.database.config.connection_engine import declarativeBase


class ConversationTurn(declarativeBase):
    """
    ORM model for the `conversations` table.

    Attributes
    ----------
    id : int
        Primary key.
    session_id : str
        Client-chosen session identifier (``"anonymous"`` when absent).
    user_message : str
        The customer's message, verbatim.
    bot_response : str
        The generated reply.
    matched_kb_id : int | None
        Id of the top-ranked knowledge entry used for grounding.
    confidence_score : float
        Confidence attached to the reply.
    feedback : str | None
        Free-form feedback label (e.g. "helpful").
    created_at : datetime
        Creation time (UTC).
    """

    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, index=True)
    user_message: Mapped[str] = mapped_column(TEXT, nullable=False)
    bot_response: Mapped[str] = mapped_column(TEXT, nullable=False)
    matched_kb_id: Mapped[int] = mapped_column(Integer, nullable=True)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False)
    feedback: Mapped[str] = mapped_column(VARCHAR(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True, default=lambda: datetime.now(timezone.utc)
    )

    def __init__(
        self,
        session_id: str,
        user_message: str,
        bot_response: str,
        matched_kb_id: int | None,
        confidence_score: float,
        created_at: datetime | None = None,
        feedback: str | None = None,
    ):
        self.session_id = session_id
        self.user_message = user_message
        self.bot_response = bot_response
        self.matched_kb_id = matched_kb_id
        self.confidence_score = confidence_score
        self.feedback = feedback
        self.created_at = created_at or datetime.now(timezone.utc)

    def __str__(self) -> str:
        return (
            f"Turn: id:{self.id}, session: {self.session_id}, "
            f"matched: {self.matched_kb_id}, time_created: {self.created_at}"
        )
