"""
Generic Repository Base Class
DRY foundation for async CRUD operations on MongoDB collections.
"""
from typing import Generic, TypeVar, Type, Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
import datetime as dt

from ..models.base import MongoBaseModel
from ..utils.observability import logger

# Generic type for domain models
T = TypeVar("T", bound=MongoBaseModel)

SortSpec = List[tuple]


def to_object_id(document_id: str) -> Optional[ObjectId]:
    """Parse a string id; malformed ids match nothing."""
    try:
        return ObjectId(document_id)
    except (InvalidId, TypeError):
        return None


class BaseRepository(Generic[T]):
    """
    Generic async repository for MongoDB collections.
    Provides type-safe CRUD operations for domain models.

    Every multi-field change goes through a single find_one_and_update, so
    fields that must change together never land separately.

    Usage:
        class ContactRepository(BaseRepository[Contact]):
            def __init__(self, database: AsyncIOMotorDatabase):
                super().__init__(database, "contacts", Contact)
    """

    # Append-only collections refuse updates
    append_only: bool = False

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        collection_name: str,
        model_class: Type[T]
    ):
        """
        Initialize repository with database connection and model type.

        Args:
            database: Motor database instance
            collection_name: MongoDB collection name
            model_class: Pydantic model class for type safety
        """
        self.database = database
        self.collection: AsyncIOMotorCollection = database[collection_name]
        self.model_class = model_class
        self.collection_name = collection_name

    async def create(self, document: T) -> T:
        """
        Insert a new document into the collection.

        Args:
            document: Domain model instance to persist

        Returns:
            The created document with `_id` populated

        Raises:
            pymongo.errors.DuplicateKeyError: If unique constraint violated
        """
        now = dt.datetime.now(dt.UTC)
        document.created_at = now
        document.updated_at = now

        doc_dict = self._to_document(document)

        result = await self.collection.insert_one(doc_dict)

        logger.debug(
            f"Created document in {self.collection_name}",
            extra={"document_id": str(result.inserted_id)}
        )

        document.id = str(result.inserted_id)
        return document

    async def find_by_id(self, document_id: str) -> Optional[T]:
        """
        Retrieve a document by its MongoDB ObjectId.

        Args:
            document_id: String representation of ObjectId

        Returns:
            Domain model instance or None if not found
        """
        object_id = to_object_id(document_id)
        if object_id is None:
            return None

        doc = await self.collection.find_one({"_id": object_id})

        if doc is None:
            return None

        return self._to_model(doc)

    async def find_one(self, filter_dict: Dict[str, Any]) -> Optional[T]:
        """
        Retrieve the first document matching the filter.

        Args:
            filter_dict: MongoDB query filter

        Returns:
            Domain model instance or None if not found
        """
        doc = await self.collection.find_one(filter_dict)

        if doc is None:
            return None

        return self._to_model(doc)

    async def find_many(
        self,
        filter_dict: Dict[str, Any],
        limit: int = 100,
        skip: int = 0,
        sort: Optional[SortSpec] = None
    ) -> List[T]:
        """
        Retrieve multiple documents matching the filter.

        Args:
            filter_dict: MongoDB query filter
            limit: Maximum number of documents to return (0 for no limit)
            skip: Number of documents to skip (pagination)
            sort: List of (field, direction) tuples for sorting

        Returns:
            List of domain model instances
        """
        cursor = self.collection.find(filter_dict).skip(skip).limit(limit)

        if sort:
            cursor = cursor.sort(sort)

        docs = await cursor.to_list(length=limit or None)

        return [self._to_model(doc) for doc in docs]

    async def list_all(self, sort: Optional[SortSpec] = None) -> List[T]:
        """Ordered scan of the whole collection."""
        return await self.find_many({}, limit=0, sort=sort)

    async def update_fields(self, document_id: str, fields: Dict[str, Any]) -> Optional[T]:
        """
        Apply a partial update in one atomic `$set`.

        Args:
            document_id: String representation of ObjectId
            fields: Field values to set (already validated by the caller)

        Returns:
            The updated domain model, or None if not found
        """
        return await self._conditional_set({}, document_id, fields)

    async def delete(self, document_id: str) -> bool:
        """
        Delete a document by its MongoDB ObjectId.

        Args:
            document_id: String representation of ObjectId

        Returns:
            True if document was deleted, False if not found
        """
        object_id = to_object_id(document_id)
        if object_id is None:
            return False

        result = await self.collection.delete_one({"_id": object_id})

        if result.deleted_count > 0:
            logger.debug(
                f"Deleted document from {self.collection_name}",
                extra={"document_id": document_id}
            )
            return True

        return False

    async def count(self, filter_dict: Optional[Dict[str, Any]] = None) -> int:
        """
        Count documents matching the filter.

        Args:
            filter_dict: MongoDB query filter (None for all documents)

        Returns:
            Number of matching documents
        """
        filter_dict = filter_dict or {}
        return await self.collection.count_documents(filter_dict)

    async def _conditional_set(
        self,
        conditions: Dict[str, Any],
        document_id: str,
        fields: Dict[str, Any],
    ) -> Optional[T]:
        """Single find_one_and_update guarded by extra match conditions."""
        if self.append_only:
            raise RuntimeError(f"{self.collection_name} is append-only")

        object_id = to_object_id(document_id)
        if object_id is None:
            return None

        fields = {k: v for k, v in fields.items() if k not in ("id", "_id", "created_at")}
        fields.setdefault("updated_at", dt.datetime.now(dt.UTC))

        doc = await self.collection.find_one_and_update(
            {"_id": object_id, **conditions},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

        if doc is None:
            return None

        logger.debug(
            f"Updated document in {self.collection_name}",
            extra={"document_id": document_id, "fields": sorted(fields)}
        )

        return self._to_model(doc)

    def _to_document(self, document: T) -> Dict[str, Any]:
        """Model to MongoDB dict, without the id or computed fields."""
        doc_dict = document.model_dump(
            by_alias=True,
            exclude={"id"},
        )

        for computed_field in type(document).model_computed_fields:
            doc_dict.pop(computed_field, None)

        return doc_dict

    def _to_model(self, doc: Dict[str, Any]) -> T:
        """
        Convert MongoDB document to Pydantic model instance.

        Args:
            doc: Raw MongoDB document dict

        Returns:
            Domain model instance
        """
        if "_id" in doc:
            doc["_id"] = str(doc["_id"])

        model_fields = self.model_class.model_fields.keys()

        cleaned_doc = {
            k: v for k, v in doc.items()
            if k in model_fields or k == "_id"
        }

        return self.model_class.model_validate(cleaned_doc)
