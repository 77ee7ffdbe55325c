"""
Pytest configuration and fixtures for the moments backend tests.

Every test gets a fresh in-memory SQLite database; the relevance scorer is
replaced by FakeScorer so no network call is ever made.
"""
import asyncio
import json
import os
import uuid

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OPENROUTER_API_KEY", "")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import createTables
from app.models import Thought


class FakeScorer:
    """
    Stand-in for OpenRouterService.completeJson

    response: str (returned as-is), JSON-able value, or callable(prompt)
    error: exception to raise
    delay: seconds to sleep before answering
    """

    def __init__(self, response=None, error=None, delay=0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.prompts = []

    async def completeJson(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error

        response = self.response(prompt) if callable(self.response) else self.response
        if isinstance(response, str):
            return response
        return json.dumps(response)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await createTables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with factory() as session:
        yield session


@pytest.fixture
def userId():
    return uuid.uuid4()


@pytest.fixture
def makeThought(db, userId):
    """Insert a thought for the test user (or another owner)"""

    async def _make(content, contextTag="meetings", status="active", source=None, owner=None):
        thought = Thought(
            user_id=owner or userId,
            content=content,
            context_tag=contextTag,
            status=status,
            source=source,
        )
        db.add(thought)
        await db.commit()
        await db.refresh(thought)
        return thought

    return _make
