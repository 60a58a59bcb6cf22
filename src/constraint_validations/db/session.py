from constraint_validations.config.settings import Settings, get_settings
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)


def create_engine_from_settings(settings: Settings | None = None, url: str | None = None) -> AsyncEngine:
    """Create the AsyncEngine for the configured database (or `url` when given)."""
    settings = settings or get_settings()
    return create_async_engine(
        url or settings.DATABASE_URL,
        echo=settings.SQLALCHEMY_ECHO,
        pool_pre_ping=True,
    )


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


