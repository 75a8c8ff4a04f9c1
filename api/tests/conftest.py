"""
Configuración de fixtures para pytest.
"""
from typing import AsyncGenerator, Dict, Iterable, List, Optional, Set

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.infrastructure.database.models  # noqa: F401
from app.infrastructure.database.session import Base, configure_sqlite
from app.infrastructure.external.cms.cms_client import CmsApiError
from app.infrastructure.external.cms.sync_config import CollectionRegistry
from app.infrastructure.external.cms.types import CmsItem


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """
    Engine en memoria por test. StaticPool para que todas las sesiones vean
    la misma base; configure_sqlite activa foreign keys y savepoints.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Sesión de base de datos en memoria para cada test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def registry() -> CollectionRegistry:
    return CollectionRegistry.from_ids(
        stories="col-stories",
        story_tags="col-story-tags",
        places="col-places",
        place_tags="col-place-tags",
        initiatives="col-initiatives",
        initiative_tags="col-initiative-tags",
    )


class FakeCmsClient:
    """Doble del CmsClient: colecciones en memoria y colecciones que fallan."""

    def __init__(
        self,
        collections: Optional[Dict[str, List[CmsItem]]] = None,
        failing: Iterable[str] = (),
    ):
        self.collections: Dict[str, List[CmsItem]] = dict(collections or {})
        self.failing: Set[str] = set(failing)
        self.calls: List[str] = []
        self.is_configured = True

    async def list_items(self, collection_id: str) -> List[CmsItem]:
        self.calls.append(collection_id)
        if collection_id in self.failing:
            raise CmsApiError(f"CMS no disponible ({collection_id})")
        return list(self.collections.get(collection_id, []))


@pytest.fixture
def fake_cms() -> FakeCmsClient:
    return FakeCmsClient()
