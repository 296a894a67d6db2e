"""
UpdateLog DAO - Create & Fetch
==============================

Thin data-access layer for the UpdateLog audit entity.

Transaction Model
-----------------
- This DAO **adds** objects to the SQLAlchemy session but does **not** call `commit()`.
  The caller controls transactions (commit/rollback) and session lifecycle.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from tyrebot.database.entities.update_logs import UpdateLog

logger = logging.getLogger(__name__)


class UpdateLogDao:
    """
    Data Access Object for `UpdateLog`.
    """

    def createLog(self, session: Session, update_log: UpdateLog) -> UpdateLog:
        try:
            session.add(update_log)
            return update_log
        except Exception:
            logger.error("Error in UpdateLogDao.createLog")
            raise

    def fetchLogs(self, session: Session) -> list[UpdateLog]:
        """Every audit record, newest first."""
        try:
            statement = select(UpdateLog).order_by(UpdateLog.created_at.desc(), UpdateLog.id.desc())
            return list(session.scalars(statement).all())
        except Exception:
            logger.error("Error in UpdateLogDao.fetchLogs")
            raise
