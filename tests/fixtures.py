"""Database fixtures for contentql tests (shared)."""

import pytest
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession

from tests.models import Author, Article


async def seed_populated_db(session: AsyncSession):
    """Create and commit the sample authors and articles used across tests and demos."""
    alice = Author(name="Alice Johnson", email="alice@example.com")
    bob = Author(name="Bob Smith", email="bob@example.com")
    session.add_all([alice, bob])
    await session.flush()
    published = datetime(2024, 1, 1, 12, 0, 0)
    articles = [
        Article(title="Hello World", slug="hello-world", body="First!", views=10, rating=4.5,
                locale="en", published_at=published, author_id=alice.id),
        Article(title="GraphQL Filters", slug="graphql-filters", body="eq, in, between", views=25, rating=3.0,
                locale="en", published_at=published + timedelta(days=1), author_id=alice.id),
        Article(title="Bonjour", slug="bonjour", body="Salut", views=5, rating=None,
                locale="fr", published_at=published + timedelta(days=2), author_id=bob.id),
        Article(title="Draft Notes", slug="draft-notes", body="wip", views=0, rating=None,
                locale="en", published_at=None, author_id=bob.id),
    ]
    session.add_all(articles)
    await session.flush()
    await session.commit()
    return {'authors': [alice, bob], 'articles': articles}


@pytest.fixture(scope="function")
async def populated_db(db_session: AsyncSession):
    return await seed_populated_db(db_session)
