"""
Base repository class providing common CRUD operations.

All entity-specific repositories inherit from this base class. Driver
errors are translated into PersistenceFailure so callers never see
PyMongo exception types.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Generic, Iterator, Optional, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pymongo.results import InsertOneResult, UpdateResult

from teachteam.core.exceptions import PersistenceFailure
from teachteam.data.database import DatabaseManager, get_database_manager
from teachteam.data.models.base import BaseDocument, utc_now
from teachteam.utils.logger import get_logger

logger = get_logger(__name__)

# Type variable for document models
T = TypeVar("T", bound=BaseDocument)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Implements both synchronous and asynchronous CRUD operations.
    Subclasses must define the collection name and model class.
    """

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """Name of the MongoDB collection."""
        pass

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Pydantic model class for this repository."""
        pass

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        """Initialize repository with database connection."""
        self._db_manager = db_manager or get_database_manager()

    # -------------------------------------------------------------------------
    # Collection Access
    # -------------------------------------------------------------------------

    def _get_sync_collection(self) -> Collection:
        """Get synchronous collection instance."""
        return self._db_manager.get_sync_collection(self.collection_name)

    def _get_async_collection(self) -> AsyncIOMotorCollection:
        """Get asynchronous collection instance."""
        return self._db_manager.get_async_collection(self.collection_name)

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate driver errors into PersistenceFailure."""
        try:
            yield
        except PyMongoError as e:
            logger.error(f"{self.collection_name}.{operation} failed: {e}")
            raise PersistenceFailure(f"{self.collection_name}.{operation}", str(e)) from e

    # -------------------------------------------------------------------------
    # Document Conversion
    # -------------------------------------------------------------------------

    def _to_model(self, document: Optional[dict[str, Any]]) -> Optional[T]:
        """Convert MongoDB document to Pydantic model."""
        if document is None:
            return None
        return self.model_class.model_validate(document)

    def _to_models(self, documents: list[dict[str, Any]]) -> list[T]:
        """Convert list of MongoDB documents to Pydantic models."""
        return [self._to_model(doc) for doc in documents if doc is not None]

    def _to_document(self, model: T) -> dict[str, Any]:
        """Convert Pydantic model to MongoDB document."""
        return model.model_dump_mongo()

    @staticmethod
    def _to_object_id(id_value: str | ObjectId) -> ObjectId:
        """Convert string to ObjectId if needed."""
        if isinstance(id_value, ObjectId):
            return id_value
        return ObjectId(id_value)

    @staticmethod
    def _is_object_id(id_value: Any) -> bool:
        if isinstance(id_value, ObjectId):
            return True
        try:
            ObjectId(id_value)
        except (InvalidId, TypeError):
            return False
        return True

    # -------------------------------------------------------------------------
    # Synchronous CRUD Operations
    # -------------------------------------------------------------------------

    def create(self, model: T) -> T:
        """Create a new document."""
        document = self._to_document(model)
        document["created_at"] = model.created_at
        document["updated_at"] = utc_now()

        with self._guard("create"):
            result: InsertOneResult = self._get_sync_collection().insert_one(document)
        model.id = result.inserted_id
        logger.debug(f"Created {self.collection_name} document: {result.inserted_id}")
        return model

    def get_by_id(self, id_value: str | ObjectId) -> Optional[T]:
        """Get a document by its ID; malformed ids simply do not match."""
        if not self._is_object_id(id_value):
            return None
        with self._guard("get_by_id"):
            document = self._get_sync_collection().find_one({"_id": self._to_object_id(id_value)})
        return self._to_model(document)

    def find(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 0,
        sort: Optional[list[tuple[str, int]]] = None,
    ) -> list[T]:
        """Find documents matching a query. A limit of 0 means no limit."""
        with self._guard("find"):
            cursor = self._get_sync_collection().find(query).skip(skip).limit(limit)
            cursor = cursor.sort(sort or [("created_at", -1)])
            documents = list(cursor)
        return self._to_models(documents)

    def find_one(self, query: dict[str, Any]) -> Optional[T]:
        """Find a single document matching a query."""
        with self._guard("find_one"):
            document = self._get_sync_collection().find_one(query)
        return self._to_model(document)

    def update_fields(self, id_value: str | ObjectId, update_data: dict[str, Any]) -> bool:
        """
        Set fields on a document by ID.

        Returns True when a document matched, even if no value changed.
        """
        if not self._is_object_id(id_value):
            return False
        update_data = {**update_data, "updated_at": utc_now()}

        with self._guard("update"):
            result: UpdateResult = self._get_sync_collection().update_one(
                {"_id": self._to_object_id(id_value)},
                {"$set": update_data},
            )

        if result.matched_count > 0:
            logger.debug(f"Updated {self.collection_name} document: {id_value}")
            return True
        return False

    def exists(self, query: dict[str, Any]) -> bool:
        """Check if any document matches the query."""
        with self._guard("exists"):
            return self._get_sync_collection().count_documents(query, limit=1) > 0

    # -------------------------------------------------------------------------
    # Asynchronous CRUD Operations
    # -------------------------------------------------------------------------

    async def find_async(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 0,
        sort: Optional[list[tuple[str, int]]] = None,
    ) -> list[T]:
        """Find documents matching a query asynchronously."""
        with self._guard("find"):
            cursor = self._get_async_collection().find(query).skip(skip).limit(limit)
            cursor = cursor.sort(sort or [("created_at", -1)])
            documents = await cursor.to_list(length=limit or None)
        return self._to_models(documents)
