# 📄 File: user_directory/modules/user_management/infrastructure/database/user_record_store_impl.py
# 🧭 Purpose (Layman Explanation):
# This file handles every database operation for user profiles when they are kept in a
# SQL database: saving, finding by id or phone number, listing and deleting.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy async implementation of UserRecordStore. Runs in one of two modes:
# "document" (indexed phone lookup, insert on register) or "document_cache" (plain
# key-value usage of the same table with flush support). One session per operation.
#
# 🔗 Dependencies:
# - user_directory.modules.user_management.domain.repositories.user_record_store (interface)
# - user_directory.modules.user_management.infrastructure.codec (document mapping)
# - user_directory.shared.config.database (engine / session factory)
# - SQLAlchemy async session and Core statements
#
# 🔄 Connected Modules / Calls From:
# - user_directory.modules.user_management.infrastructure.factory (store construction)
# - Domain services through the UserRecordStore interface

"""
SQL User Record Store

Features:
- Async database operations, one short-lived session per call
- Document <-> ORM model mapping through the record codec
- Lookup failures reported as LookupResult.failed, never as "not found"
- Primary key collisions on insert surfaced as DuplicateResourceError
- Table bootstrap on connect (no migrations)
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from user_directory.modules.user_management.domain.models.lookup import LookupResult
from user_directory.modules.user_management.domain.models.user_record import UserRecord
from user_directory.modules.user_management.domain.repositories.user_record_store import (
    DOCUMENT_CACHE_CAPABILITIES,
    DOCUMENT_CAPABILITIES,
    UserRecordStore,
)
from user_directory.modules.user_management.infrastructure.codec import (
    from_document,
    identifier_from_key,
    to_document,
)
from user_directory.modules.user_management.infrastructure.database.models import UserRecordModel
from user_directory.shared.config.database import DatabaseBase, DatabaseConfig
from user_directory.shared.core.exceptions import (
    DuplicateResourceError,
    StorageError,
    UnsupportedOperationError,
)


logger = logging.getLogger(__name__)

SQL_MODES = {
    "document": DOCUMENT_CAPABILITIES,
    "document_cache": DOCUMENT_CACHE_CAPABILITIES,
}

# Connection refusals from the driver may surface as OSError before SQLAlchemy wraps them
BACKEND_ERRORS = (SQLAlchemyError, OSError)


class SQLUserRecordStore(UserRecordStore):
    """
    SQLAlchemy implementation of the UserRecordStore interface.

    Keys are bare record identifiers; the table's primary key column is "_id".
    """

    def __init__(
        self,
        database_config: Optional[DatabaseConfig] = None,
        mode: str = "document",
        create_tables: bool = True,
    ):
        """
        Initialize the SQL store.

        Args:
            database_config: Engine / session configuration
            mode: "document" or "document_cache"
            create_tables: Create the table on connect when missing
        """
        if mode not in SQL_MODES:
            raise ValueError(f"Unknown SQL store mode: {mode}")

        self._config = database_config or DatabaseConfig()
        self._create_tables = create_tables
        self._session_factory = None

        self.backend_name = mode
        self.capabilities = SQL_MODES[mode]
        self.key_prefix = ""

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def connect(self) -> None:
        engine = self._config.create_async_engine()
        self._session_factory = self._config.create_async_session_factory()

        if self._create_tables:
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(DatabaseBase.metadata.create_all)
            except BACKEND_ERRORS as e:
                logger.error(f"Failed to create user profile table: {str(e)}")
                raise StorageError(
                    message="Failed to initialise record store",
                    operation="connect",
                    details={"cause": str(e)},
                ) from e

        logger.info(f"SQL record store connected (mode={self.backend_name})")

    async def close(self) -> None:
        await self._config.close_async_engine()
        self._session_factory = None
        logger.info("SQL record store closed")

    async def health_check(self) -> Dict[str, Any]:
        try:
            async with self._session() as session:
                await session.execute(text("SELECT 1"))
            return {"status": "healthy", "backend": self.backend_name}
        except (BACKEND_ERRORS + (StorageError,)) as e:
            logger.error(f"SQL record store health check failed: {str(e)}")
            return {"status": "unhealthy", "backend": self.backend_name, "error": str(e)}

    def _session(self):
        if self._session_factory is None:
            raise StorageError(message="Record store is not connected", operation="session")
        return self._session_factory()

    # =========================================================================
    # MAPPING
    # =========================================================================

    @staticmethod
    def _record_to_model(record: UserRecord) -> UserRecordModel:
        document = to_document(record)
        return UserRecordModel(
            record_id=document["_id"],
            name=document["name"],
            phone_number=document["phone_number"],
            image_url=document["image_url"],
            status=document["status"],
        )

    @staticmethod
    def _model_to_record(model: UserRecordModel) -> UserRecord:
        return from_document({
            "_id": model.record_id,
            "name": model.name,
            "phone_number": model.phone_number,
            "image_url": model.image_url,
            "status": model.status,
        })

    def _identifier(self, key: str) -> str:
        return identifier_from_key(key, self.key_prefix)

    # =========================================================================
    # READS
    # =========================================================================

    async def get_by_key(self, key: str) -> LookupResult:
        identifier = self._identifier(key)
        try:
            async with self._session() as session:
                model = await session.get(UserRecordModel, identifier)

            if model is None:
                logger.debug(f"User record not found: {identifier}")
                return LookupResult.not_found()

            return LookupResult.found(self._model_to_record(model))

        except (BACKEND_ERRORS + (StorageError,)) as e:
            logger.error(f"Database error retrieving user record {identifier}: {str(e)}")
            return LookupResult.failed(e)

    async def get_by_attribute(self, attribute: str, value: str) -> LookupResult:
        """
        Get the first record whose document field equals value.

        Args:
            attribute: Document field name ("phone_number", "name", ...)
            value: Value to match

        Returns:
            LookupResult: first match, not found, or backend error
        """
        if not self.capabilities.secondary_lookup:
            raise UnsupportedOperationError(
                operation="get_by_attribute", backend=self.backend_name
            )

        column = UserRecordModel.__table__.c.get(attribute)
        if column is None:
            raise ValueError(f"Unknown document field: {attribute}")

        try:
            stmt = select(UserRecordModel).where(column == value).limit(1)
            async with self._session() as session:
                result = await session.execute(stmt)
                model = result.scalars().first()

            if model is None:
                logger.debug(f"No user record with {attribute}={value}")
                return LookupResult.not_found()

            return LookupResult.found(self._model_to_record(model))

        except (BACKEND_ERRORS + (StorageError,)) as e:
            logger.error(f"Database error retrieving user record by {attribute}: {str(e)}")
            return LookupResult.failed(e)

    async def exists(self, key: str) -> bool:
        identifier = self._identifier(key)
        try:
            stmt = select(UserRecordModel.record_id).where(UserRecordModel.record_id == identifier)
            async with self._session() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none() is not None
        except BACKEND_ERRORS as e:
            logger.error(f"Database error checking user record {identifier}: {str(e)}")
            raise StorageError(
                message="Failed to check record existence", operation="exists", key=identifier
            ) from e

    async def list_keys(self) -> List[str]:
        try:
            async with self._session() as session:
                result = await session.execute(select(UserRecordModel.record_id))
                return list(result.scalars().all())
        except BACKEND_ERRORS as e:
            logger.error(f"Database error listing user record keys: {str(e)}")
            raise StorageError(message="Failed to list record keys", operation="list_keys") from e

    async def scan_all(self) -> List[UserRecord]:
        try:
            async with self._session() as session:
                result = await session.execute(select(UserRecordModel))
                models = result.scalars().all()
        except BACKEND_ERRORS as e:
            logger.error(f"Database error scanning user records: {str(e)}")
            raise StorageError(message="Failed to scan records", operation="scan_all") from e

        return [self._model_to_record(model) for model in models]

    # =========================================================================
    # WRITES
    # =========================================================================

    async def put(self, record: UserRecord) -> None:
        try:
            async with self._session() as session:
                await session.merge(self._record_to_model(record))
                await session.commit()
            logger.debug(f"Stored user record: {record.id}")
        except BACKEND_ERRORS as e:
            logger.error(f"Database error storing user record {record.id}: {str(e)}")
            raise StorageError(
                message="Failed to store record", operation="put", key=record.id
            ) from e

    async def insert(self, record: UserRecord) -> None:
        if not self.capabilities.insert_on_register:
            await self.put(record)
            return

        try:
            async with self._session() as session:
                session.add(self._record_to_model(record))
                await session.commit()
            logger.info(f"Inserted user record with ID: {record.id}")

        except IntegrityError as e:
            logger.warning(f"User record insert failed - id already exists: {record.id}")
            raise DuplicateResourceError(
                message="A user with this id already exists",
                resource_type="user",
                field="id",
                value=record.id,
            ) from e

        except BACKEND_ERRORS as e:
            logger.error(f"Database error inserting user record {record.id}: {str(e)}")
            raise StorageError(
                message="Failed to insert record", operation="insert", key=record.id
            ) from e

    async def delete_by_key(self, key: str) -> bool:
        identifier = self._identifier(key)
        try:
            stmt = delete(UserRecordModel).where(UserRecordModel.record_id == identifier)
            async with self._session() as session:
                result = await session.execute(stmt)
                await session.commit()
            return (result.rowcount or 0) > 0
        except BACKEND_ERRORS as e:
            logger.error(f"Database error deleting user record {identifier}: {str(e)}")
            raise StorageError(
                message="Failed to delete record", operation="delete", key=identifier
            ) from e

    async def flush(self) -> int:
        if not self.capabilities.flush:
            raise UnsupportedOperationError(operation="flush", backend=self.backend_name)

        try:
            async with self._session() as session:
                result = await session.execute(delete(UserRecordModel))
                await session.commit()
            return result.rowcount or 0
        except BACKEND_ERRORS as e:
            logger.error(f"Database error flushing user records: {str(e)}")
            raise StorageError(message="Failed to flush records", operation="flush") from e
