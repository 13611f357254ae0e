# 📄 File: user_directory/shared/config/database.py
#
# 🧭 Purpose (Layman Explanation):
# Configuration for connecting to the SQL database that holds user profiles,
# managing connections so many requests can read and write at the same time.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy async engine configuration with connection pooling, session factory
# creation, and environment-specific settings for PostgreSQL (asyncpg) or SQLite (aiosqlite).
#
# 🔗 Dependencies:
# - SQLAlchemy async engine and session
# - user_directory.shared.config.settings
# - asyncpg / aiosqlite drivers
#
# 🔄 Connected Modules / Calls From:
# - user_directory.modules.user_management.infrastructure.database.user_record_store_impl
# - user_directory.modules.user_management.infrastructure.database.models

from typing import Any, Dict, Optional

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from .settings import Settings, get_settings


# =============================================================================
# DATABASE CONFIGURATION
# =============================================================================

class DatabaseConfig:
    """Database configuration class with environment-specific settings."""

    def __init__(self, settings: Optional[Settings] = None, database_url: Optional[str] = None):
        self.settings = settings or get_settings()
        self._database_url = database_url
        self._async_engine: AsyncEngine | None = None
        self._async_session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def database_url(self) -> str:
        """Get the database URL for async connections."""
        return self._database_url or self.settings.database_url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def engine_kwargs(self) -> Dict[str, Any]:
        """Get SQLAlchemy engine configuration based on environment."""

        base_config: Dict[str, Any] = {
            "echo": self.settings.DEBUG and self.settings.is_development,
        }

        # SQLite has no server settings and manages its own pool
        if self.is_sqlite:
            return base_config

        base_config["connect_args"] = {
            "server_settings": {
                "application_name": f"user_directory_{self.settings.ENVIRONMENT}",
                "jit": "off",  # Disable JIT for better connection times
            }
        }

        if self.settings.is_testing:
            # Use NullPool for testing to avoid connection issues
            base_config["poolclass"] = NullPool
        else:
            base_config.update({
                "pool_size": self.settings.DB_POOL_SIZE,
                "max_overflow": self.settings.DB_MAX_OVERFLOW,
                "pool_timeout": self.settings.DB_POOL_TIMEOUT,
                "pool_recycle": self.settings.DB_POOL_RECYCLE,
                "pool_pre_ping": True,  # Verify connections before use
            })

            if self.settings.is_production:
                base_config["connect_args"].update({
                    "command_timeout": 30,
                    "server_settings": {
                        **base_config["connect_args"]["server_settings"],
                        "timezone": "UTC",
                        "statement_timeout": "300000",  # 5 minutes
                    }
                })

        return base_config

    def create_async_engine(self) -> AsyncEngine:
        """Create and configure async database engine."""
        if self._async_engine is None:
            self._async_engine = create_async_engine(
                self.database_url,
                **self.engine_kwargs
            )
        return self._async_engine

    def create_async_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Create async session factory."""
        if self._async_session_factory is None:
            engine = self.create_async_engine()
            self._async_session_factory = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._async_session_factory

    async def close_async_engine(self) -> None:
        """Close the async database engine."""
        if self._async_engine:
            await self._async_engine.dispose()
            self._async_engine = None
            self._async_session_factory = None


# =============================================================================
# DATABASE MODELS BASE CLASS
# =============================================================================

# Naming convention for database constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


class DatabaseBase(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Provides the shared metadata (and constraint naming convention)
    for every table the directory service creates.
    """
    metadata = metadata
