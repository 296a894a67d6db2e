"""
Admin User DAO

Data-access layer for the `AdminUser` ORM entity. Password hashing happens in
the store layer (see `tyrebot.crypt.encrypt_decrypt`); the DAO only persists
and reads rows.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from tyrebot.database.entities.admin_user import AdminUser

logger = logging.getLogger(__name__)


class AdminUserDao:
    """
    Data Access Object (DAO) for managing AdminUser entities.
    """

    def createAdmin(self, session: Session, admin: AdminUser) -> AdminUser:
        try:
            session.add(admin)
            session.flush()
            return admin
        except Exception:
            logger.error("Error in AdminUserDao.createAdmin (username=%s)", admin.username)
            raise

    def fetchActiveAdmin(self, session: Session, username: str) -> AdminUser | None:
        """Return the active admin with this username, if any."""
        try:
            statement = (
                select(AdminUser)
                .where(AdminUser.username == username)
                .where(AdminUser.is_active.is_(True))
                .limit(1)
            )
            return session.scalars(statement).first()
        except Exception:
            logger.error("Error in AdminUserDao.fetchActiveAdmin (username=%s)", username)
            raise

    def updateLastLogin(self, session: Session, admin: AdminUser) -> None:
        try:
            admin.last_login = datetime.now(timezone.utc)
        except Exception:
            logger.error("Error in AdminUserDao.updateLastLogin (username=%s)", admin.username)
            raise
