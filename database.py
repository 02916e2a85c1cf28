"""
MongoDB helpers.

Documents are plain dicts (or pydantic models, which are dumped first). Every
document gets `created_at`/`updated_at` timestamps on insert.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import DESCENDING, MongoClient

from config import DATABASE_NAME, DATABASE_URL

logger = logging.getLogger(__name__)

client: Optional[MongoClient] = None
db = None

if DATABASE_URL:
    client = MongoClient(DATABASE_URL, tz_aware=True)
    db = client[DATABASE_NAME]
else:
    logger.warning("DATABASE_URL is not set, database is unavailable")


class DatabaseUnavailable(Exception):
    pass


def _collection(collection_name: str):
    if db is None:
        raise DatabaseUnavailable("Database not available. Check DATABASE_URL and DATABASE_NAME.")
    return db[collection_name]


def to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    if isinstance(data, BaseModel):
        doc = data.model_dump()
    else:
        doc = dict(data)
    now = datetime.now(timezone.utc)
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = _collection(collection_name).insert_one(doc)
    logger.debug("inserted %s into %s", result.inserted_id, collection_name)
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    cursor = _collection(collection_name).find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort, DESCENDING if descending else 1)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def delete_documents(collection_name: str, filter_dict: Dict[str, Any]) -> int:
    result = _collection(collection_name).delete_many(filter_dict)
    logger.debug("deleted %d from %s", result.deleted_count, collection_name)
    return result.deleted_count
