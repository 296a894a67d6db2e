"""
Pytest configuration and fixtures for the tyrebot tests.

Every test gets its own file-backed SQLite database under ``tmp_path``.
Generation is replaced by in-memory fakes (see ``tests/fakes.py``).
"""

from datetime import datetime, timezone

import pytest

from tests.fakes import RecordingGeneration
from tyrebot.database.config.config import Settings
from tyrebot.database.config.connection_engine import Database
from tyrebot.database.core.analytics import AnalyticsAggregator
from tyrebot.database.core.conversation_store import ConversationStore
from tyrebot.database.core.knowledge_store import KnowledgeStore
from tyrebot.pipeline.matcher import QueryMatcher
from tyrebot.pipeline.orchestrator import DialogueOrchestrator


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, SECRET_KEY="test-secret", ENVIRONMENT="development")


@pytest.fixture()
def database(tmp_path):
    db = Database(
        f"sqlite+pysqlite:///{tmp_path / 'tyrebot.db'}",
        connect_args={"check_same_thread": False},
    )
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def knowledge_store(database) -> KnowledgeStore:
    return KnowledgeStore(database)


@pytest.fixture()
def conversation_store(database) -> ConversationStore:
    return ConversationStore(database)


@pytest.fixture()
def analytics(database) -> AnalyticsAggregator:
    return AnalyticsAggregator(database)


@pytest.fixture()
def generation() -> RecordingGeneration:
    return RecordingGeneration()


@pytest.fixture()
def orchestrator(knowledge_store, conversation_store, generation) -> DialogueOrchestrator:
    return DialogueOrchestrator(
        matcher=QueryMatcher(knowledge_store),
        generation_service=generation,
        conversation_store=conversation_store,
        max_tokens=1024,
    )


@pytest.fixture()
def warranty_entry(knowledge_store):
    return knowledge_store.add_entry(
        category="Warranty",
        question="What is the warranty on CEAT tyres?",
        answer="CEAT tyres carry a manufacturing-defect warranty; see the warranty card for terms.",
        keywords=["warranty"],
        created_by="admin",
    )


@pytest.fixture()
def base_time() -> datetime:
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
