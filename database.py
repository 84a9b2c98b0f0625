"""
MongoDB helpers.

`db` is None when DATABASE_URL / DATABASE_NAME are not configured; every
helper raises in that case so callers can decide how to degrade.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel
from pymongo import MongoClient

from config import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()
_client = None
db = None

if _settings.database_url and _settings.database_name:
    try:
        _client = MongoClient(_settings.database_url, serverSelectionTimeoutMS=5000)
        db = _client[_settings.database_name]
    except Exception as e:
        logger.error(f"Could not initialise MongoDB client: {e}")
        db = None


def _to_dict(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def _require_db():
    if db is None:
        raise RuntimeError("Database not available. Set DATABASE_URL and DATABASE_NAME.")
    return db


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, stamping created_at/updated_at. Returns the new id."""
    database = _require_db()
    doc = _to_dict(data)
    now = datetime.now(timezone.utc)
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = database[collection_name].insert_one(doc)
    return str(result.inserted_id)


def upsert_document(collection_name: str, doc_id: str, data: Union[BaseModel, Dict[str, Any]]) -> None:
    """Create or overwrite the fields of the document whose _id is doc_id."""
    database = _require_db()
    doc = _to_dict(data)
    doc["updated_at"] = datetime.now(timezone.utc)
    database[collection_name].update_one({"_id": doc_id}, {"$set": doc}, upsert=True)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    sort: Optional[List[Tuple[str, int]]] = None,
) -> List[Dict[str, Any]]:
    database = _require_db()
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    docs = []
    for d in cursor:
        d["_id"] = str(d["_id"])
        docs.append(d)
    return docs
