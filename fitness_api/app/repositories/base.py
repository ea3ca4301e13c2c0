"""
Base repository for MongoDB collections.

``BaseRepository`` wraps one pymongo collection and implements the
operations shared by every domain: creation with timestamps, lookups,
pagination, partial updates, soft and hard deletes, counting and
aggregation.  Reads and updates skip soft-deleted documents unless
``include_deleted=True`` is passed.

Subclasses set ``collection_name`` and override ``ensure_indexes``::

    class UserRepository(BaseRepository):
        collection_name = "users"

        def ensure_indexes(self) -> None:
            self.collection.create_index("email", unique=True)

The module also holds the conversion helpers used at the boundary
between pydantic models, BSON documents and API responses.
"""

import logging
import math
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, TypedDict, Union

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ReturnDocument

from ..core.exceptions import BadRequestError

logger = logging.getLogger(__name__)

NOT_DELETED = {"is_deleted": {"$ne": True}}

SortSpec = Optional[Sequence[Tuple[str, int]]]


class PaginatedResult(TypedDict):
    items: List[Dict[str, Any]]
    total: int
    page: int
    limit: int
    pages: int
    has_next: bool
    has_prev: bool


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, ObjectId) or (isinstance(value, str) and ObjectId.is_valid(value))


def to_object_id(value: Union[str, ObjectId], message: str = "Invalid ID") -> ObjectId:
    """Convert a string to an ``ObjectId``, raising ``BadRequestError`` if malformed."""
    if isinstance(value, ObjectId):
        return value
    if not is_valid_object_id(value):
        raise BadRequestError(message)
    return ObjectId(value)


def _to_bson(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, dict):
        return {key: _to_bson(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_bson(item) for item in value]
    return value


def to_document(model: BaseModel, exclude_unset: bool = False, exclude_none: bool = False) -> Dict[str, Any]:
    """Dump a pydantic model into a dict MongoDB can store.

    BSON has no date-only type, so ``date`` values become midnight UTC
    datetimes.  Partial updates pass both flags: a field sent as
    ``null`` is left unchanged.
    """
    return _to_bson(model.model_dump(exclude_unset=exclude_unset, exclude_none=exclude_none))


def serialize_document(document: Any) -> Any:
    """Make a stored document JSON friendly.

    ``_id`` is renamed to ``id`` and every ``ObjectId`` becomes its hex
    string.  Datetimes are left alone; FastAPI encodes them.
    """
    if isinstance(document, ObjectId):
        return str(document)
    if isinstance(document, list):
        return [serialize_document(item) for item in document]
    if isinstance(document, Mapping):
        result = {}
        for key, value in document.items():
            result["id" if key == "_id" else key] = serialize_document(value)
        return result
    return document


class BaseRepository:
    """CRUD operations shared by every collection."""

    collection_name: str = ""

    def __init__(self, database=None) -> None:
        if database is None:
            from ..core.db import get_database

            database = get_database()
        self.collection = database[self.collection_name]

    def ensure_indexes(self) -> None:
        """Create the indexes of the collection.  Override in subclasses."""

    @staticmethod
    def _scoped(query: Optional[Dict[str, Any]], include_deleted: bool = False) -> Dict[str, Any]:
        query = dict(query or {})
        if not include_deleted:
            query.update(NOT_DELETED)
        return query

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = utcnow()
        document = dict(data)
        document.setdefault("created_at", now)
        document["updated_at"] = now
        document["is_deleted"] = False
        document["deleted_at"] = None
        result = self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    def find_by_id(self, document_id: Union[str, ObjectId], include_deleted: bool = False) -> Optional[Dict[str, Any]]:
        return self.find_one({"_id": to_object_id(document_id)}, include_deleted=include_deleted)

    def find_one(self, query: Dict[str, Any], include_deleted: bool = False) -> Optional[Dict[str, Any]]:
        return self.collection.find_one(self._scoped(query, include_deleted))

    def find(
        self,
        query: Optional[Dict[str, Any]] = None,
        sort: SortSpec = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> List[Dict[str, Any]]:
        cursor = self.collection.find(self._scoped(query, include_deleted), projection)
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def paginate(
        self,
        query: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: int = 10,
        sort: SortSpec = None,
        include_deleted: bool = False,
    ) -> PaginatedResult:
        """Return one page of documents plus the paging metadata."""
        page = max(page, 1)
        limit = max(limit, 1)
        scoped = self._scoped(query, include_deleted)
        total = self.collection.count_documents(scoped)
        items = self.find(
            scoped,
            sort=sort or [("created_at", -1)],
            skip=(page - 1) * limit,
            limit=limit,
            include_deleted=True,
        )
        pages = math.ceil(total / limit)
        return {
            "items": items,
            "total": total,
            "page": page,
            "limit": limit,
            "pages": pages,
            "has_next": page < pages,
            "has_prev": page > 1,
        }

    def update(
        self,
        query: Dict[str, Any],
        update: Dict[str, Any],
        include_deleted: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """Apply ``update`` to the first matching document and return the new version.

        A plain field dict is treated as ``$set``; operator documents
        (``$push``, ``$inc`` and so on) are passed through.  ``updated_at``
        is refreshed either way.
        """
        if not any(key.startswith("$") for key in update):
            update = {"$set": dict(update)}
        else:
            update = {key: dict(value) if isinstance(value, dict) else value for key, value in update.items()}
        update.setdefault("$set", {})["updated_at"] = utcnow()
        return self.collection.find_one_and_update(
            self._scoped(query, include_deleted),
            update,
            return_document=ReturnDocument.AFTER,
        )

    def soft_delete(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        now = utcnow()
        return self.collection.find_one_and_update(
            self._scoped(query),
            {"$set": {"is_deleted": True, "deleted_at": now, "updated_at": now}},
            return_document=ReturnDocument.AFTER,
        )

    def hard_delete(self, query: Dict[str, Any]) -> bool:
        result = self.collection.delete_one(query)
        return result.deleted_count > 0

    def count(self, query: Optional[Dict[str, Any]] = None, include_deleted: bool = False) -> int:
        return self.collection.count_documents(self._scoped(query, include_deleted))

    def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return list(self.collection.aggregate(pipeline))
