"""
AdminUser ORM Model
===================

Knowledge-base administrators. Only active accounts may sign in; the
password is stored as a bcrypt hash.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column

from tyrebot.database.config.connection_engine import declarativeBase


class AdminUser(declarativeBase):
    """
    ORM model for the `admin_users` table.

    Attributes
    ----------
    username : str
        Unique login name.
    password_hash : str
        bcrypt hash of the password.
    full_name : str | None
        Display name.
    role : str
        Role claim embedded in issued tokens (e.g. "admin", "editor").
    is_active : bool
        Inactive accounts cannot sign in.
    last_login : datetime | None
        Stamped on every successful login.
    """

    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    full_name: Mapped[str] = mapped_column(VARCHAR(255), nullable=True)
    role: Mapped[str] = mapped_column(VARCHAR(64), nullable=False, default="admin")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __init__(self, username: str, password_hash: str, full_name: str | None = None, role: str = "admin", is_active: bool = True):
        self.username = username
        self.password_hash = password_hash
        self.full_name = full_name
        self.role = role
        self.is_active = is_active
        self.created_at = datetime.now(timezone.utc)
