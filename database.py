"""
Database Helper Functions

MongoDB connection plus the small document helpers the API modules share.
Collections are named after the lowercase schema class (Resource -> "resource").
"""

from datetime import datetime, timezone
from typing import Union, Any, Dict, List, Optional

from pymongo import MongoClient, ASCENDING, DESCENDING
from pydantic import BaseModel

from config import settings
from exceptions import InternalError
from logging_config import logger

_client = None
db = None

if settings.DATABASE_URL and settings.DATABASE_NAME:
    _client = MongoClient(settings.DATABASE_URL)
    db = _client[settings.DATABASE_NAME]
else:
    logger.warning("[DB] DATABASE_URL / DATABASE_NAME not set, database disabled")


def get_db():
    if db is None:
        raise InternalError("Database not configured")
    return db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document with createdAt/updatedAt timestamps, return its id"""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump(by_alias=True)
    else:
        data_dict = dict(data)

    now = utcnow()
    data_dict.setdefault("createdAt", now)
    data_dict["updatedAt"] = now

    result = get_db()[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None, sort: Optional[List] = None) -> List[Dict[str, Any]]:
    cursor = get_db()[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def ensure_indexes() -> None:
    """Create the indexes the catalog and OTP flow rely on"""
    database = get_db()
    database["resource"].create_index([("courseCode", ASCENDING)])
    database["resource"].create_index([("createdAt", DESCENDING)])
    database["coursestats"].create_index([("courseCode", ASCENDING)], unique=True)
    database["otp"].create_index([("email", ASCENDING)], unique=True)
    # Records are purged by the store once expiresAt has passed
    database["otp"].create_index([("expiresAt", ASCENDING)], expireAfterSeconds=0)
    logger.info("[DB] Indexes ensured")
