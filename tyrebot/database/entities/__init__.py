"""
Entities Package - SQLAlchemy 2.0 ORM Models
============================================

The `entities` package defines the ORM models of the application, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes are consumed by DAOs (`daos` package).

Tech Stack & Conventions
------------------------
- Integer surrogate keys (portable across PostgreSQL and SQLite)
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`

Contents
--------
- KnowledgeEntry / KnowledgeKeyword
    Curated question/answer records with category, keyword tags, version and
    active flag.
- ConversationTurn
    One persisted chat exchange with match metadata and optional feedback.
- UpdateLog
    Audit trail of knowledge-base changes (single adds, CSV bulk uploads).
- AdminUser
    Knowledge-base administrators (bcrypt password hashes).
- Product
    Tyre catalogue entries.
"""

from tyrebot.database.entities.knowledge_base import KnowledgeEntry, KnowledgeKeyword
from tyrebot.database.entities.conversations import ConversationTurn
from tyrebot.database.entities.update_logs import UpdateLog
from tyrebot.database.entities.admin_user import AdminUser
from tyrebot.database.entities.products import Product
