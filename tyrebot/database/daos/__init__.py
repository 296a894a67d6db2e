"""
DAOs Package - Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package provides the Data Access Layer for the application.
It encapsulates all interactions with SQLAlchemy ORM entities, providing
clean CRUD APIs for the store layer while hiding direct query details.

Conventions
-----------
- SQLAlchemy 2.0 `select()` / `update()` statements
- Session lifecycle (open/commit/rollback) is handled by callers
- DAOs surface exceptions so upper layers decide error policy

Contents
--------
- KnowledgeBaseDao
    * Ranked search over active entries (question > keyword > answer)
    * Admin listing with filters and pagination, create/update/delete
    * Category aggregate
- ConversationDao
    * Appends turns, updates feedback by id
    * Time-ranged reads, counts, feedback distribution and top questions
- UpdateLogDao
    * Persists and reads knowledge-base audit records
- AdminUserDao
    * Looks up active administrators, stamps last login
- ProductDao
    * Lists active products and adds new ones
"""
