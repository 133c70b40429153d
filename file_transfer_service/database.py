from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker

from config import settings
from models import Base
from logging_config import get_logger

logger = get_logger(__name__)

def build_engine(database_url: str, pool_size: int = settings.DB_POOL_SIZE) -> AsyncEngine:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # in-memory SQLite lives on a single static connection
        return create_async_engine(url)
    return create_async_engine(url, pool_size=pool_size)

def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

async def init_db(engine: AsyncEngine) -> None:
    logger.info("Running database migrations...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created or already exist.")

engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = build_session_factory(engine)

