"""
Session-per-call transactions for store objects
===============================================

``@transactional`` wraps a method of any object exposing a ``database``
attribute (a :class:`~tyrebot.database.config.connection_engine.Database`).
The first decorated call on the stack opens a session and publishes it in
``db_session_context``; decorated calls made underneath receive that same
session, so nested store calls commit or roll back together.

Blocking store calls issued through ``asyncio.to_thread`` run in a copy of
the caller's context, so each turn sees only its own session.
"""

import contextvars
from functools import wraps

db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Session of the outermost running transaction, or None."""


def transactional(func):
    """
    Run ``func(self, *args, session=..., **kwargs)`` inside a transaction.

    The outermost call flushes and commits when ``func`` returns, rolls back
    and re-raises when it fails, and always closes the session. Inner calls
    only borrow the session.

    Example
    -------
    >>> class EntryStore:
    ...     def __init__(self, database):
    ...         self.database = database
    ...
    ...     @transactional
    ...     def add(self, entry, session=None):
    ...         session.add(entry)
    ...         return entry
    """
    @wraps(func)
    def wrap_func(self, *args, **kwargs):
        active = db_session_context.get()
        if active is not None:
            return func(self, *args, session=active, **kwargs)

        session = self.database.new_session()
        token = db_session_context.set(session)
        try:
            result = func(self, *args, session=session, **kwargs)
            session.flush()
            session.commit()
            return result
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)

    return wrap_func
