"""
Resource catalog: storage, filtered queries, interaction counters and
comment threads for the `resource` collection.
"""

import re
import time
from typing import Optional, List, Dict, Any, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError as SchemaValidationError
from pymongo import DESCENDING, ReturnDocument

import database
from exceptions import ValidationError, NotFoundError, InvalidActionError
from logging_config import logger
from schemas import Resource, ResourceCreate, Comment, RESOURCE_TYPES

COLLECTION = "resource"

# action -> (counter field, delta)
INTERACTIONS = {
    "view": ("views", 1),
    "download": ("downloads", 1),
    "upvote": ("upvotes", 1),
    "downvote": ("upvotes", -1),
}

SEARCH_FIELDS = ("title", "courseCode", "topics", "professor")

ALL = "ALL"

ANONYMOUS = "Anonymous"


def oid(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise NotFoundError("Resource", str(id_str))


def quality_from_completeness(completeness: int) -> int:
    return min(100, int(completeness * 0.9) + 5)


def _format_errors(exc: SchemaValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", ""))
    return "; ".join(parts)


# ----------------------
# Resource store
# ----------------------

def parse_metadata(metadata: Any) -> ResourceCreate:
    if isinstance(metadata, ResourceCreate):
        return metadata
    if not isinstance(metadata, dict):
        raise ValidationError("Resource metadata must be a JSON object", field="data")
    try:
        return ResourceCreate.model_validate(metadata)
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid resource metadata: {_format_errors(e)}", field="data")


def create_resource(metadata: Union[Dict[str, Any], ResourceCreate], file_url: str) -> Dict[str, Any]:
    """Validate upload metadata and insert a new resource.

    courseCode and slot are upper-cased, counters start at zero and the
    quality score is derived from completeness.
    """
    meta = parse_metadata(metadata)

    resource = Resource(
        title=meta.title,
        course_code=meta.course_code.upper(),
        slot=meta.slot.upper(),
        type=meta.type,
        topics=meta.topics,
        quality_score=quality_from_completeness(meta.completeness),
        completeness=meta.completeness,
        author=(meta.author or "").strip() or ANONYMOUS,
        professor=meta.professor,
        semester=meta.semester,
        year=meta.year,
        description=meta.description,
        pdf_url=file_url,
    )

    rid = database.create_document(COLLECTION, resource)
    logger.info(f"[Catalog] Created resource {rid} ({resource.course_code}/{resource.slot})")
    return get_resource(rid)


def get_resource(resource_id: str) -> Dict[str, Any]:
    doc = database.get_db()[COLLECTION].find_one({"_id": oid(resource_id)})
    if not doc:
        raise NotFoundError("Resource", resource_id)
    return doc


# ----------------------
# Query engine
# ----------------------

def _is_unset(value: Optional[str]) -> bool:
    return value is None or not value.strip() or value.strip().upper() == ALL


def build_query(type: Optional[str] = None, slot: Optional[str] = None,
                course: Optional[str] = None, search: Optional[str] = None) -> Dict[str, Any]:
    """Translate list filters into a MongoDB filter document.

    Absent or "ALL" type/slot values add no condition. `search` matches any
    document holding at least one of its terms as a whole word in an
    indexed field.
    """
    q: Dict[str, Any] = {}
    if not _is_unset(type):
        q["type"] = type.strip()
    if not _is_unset(slot):
        q["slot"] = slot.strip().upper()
    if course and course.strip():
        q["courseCode"] = {"$regex": re.escape(course.strip()), "$options": "i"}
    if search and search.strip():
        clauses = []
        for term in dict.fromkeys(search.split()):
            pattern = rf"(^|\W){re.escape(term)}($|\W)"
            for field in SEARCH_FIELDS:
                clauses.append({field: {"$regex": pattern, "$options": "i"}})
        q["$or"] = clauses
    return q


def list_resources(type: Optional[str] = None, slot: Optional[str] = None,
                   course: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
    if not _is_unset(type) and type.strip() not in RESOURCE_TYPES:
        return []
    q = build_query(type=type, slot=slot, course=course, search=search)
    return database.get_documents(COLLECTION, q, sort=[("createdAt", DESCENDING), ("_id", DESCENDING)])


# ----------------------
# Interaction counters
# ----------------------

def record_interaction(resource_id: str, action: str) -> int:
    """Atomically apply an interaction and return the new counter value"""
    if action not in INTERACTIONS:
        raise InvalidActionError(action)
    field, delta = INTERACTIONS[action]

    updated = database.get_db()[COLLECTION].find_one_and_update(
        {"_id": oid(resource_id)},
        {"$inc": {field: delta}, "$set": {"updatedAt": database.utcnow()}},
        projection={field: True},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise NotFoundError("Resource", resource_id)
    return updated[field]


def counter_key(action: str) -> str:
    """Response key for an action, e.g. upvote -> upvotes"""
    return INTERACTIONS[action][0]


# ----------------------
# Comment thread
# ----------------------

def _next_comment_id(existing: List[Dict[str, Any]]) -> str:
    now_ms = int(time.time() * 1000)
    latest = 0
    for c in existing:
        try:
            latest = max(latest, int(c.get("id", 0)))
        except (TypeError, ValueError):
            continue
    return str(max(now_ms, latest + 1))


def add_comment(resource_id: str, author: Optional[str], text: Optional[str]) -> Dict[str, Any]:
    if not text or not text.strip():
        raise ValidationError("Comment text is required", field="text")

    resources = database.get_db()[COLLECTION]
    _id = oid(resource_id)
    parent = resources.find_one({"_id": _id}, projection={"author": True, "comments": True})
    if not parent:
        raise NotFoundError("Resource", resource_id)

    author = (author or "").strip() or ANONYMOUS
    comment = Comment(
        id=_next_comment_id(parent.get("comments", [])),
        author=author,
        text=text.strip(),
        timestamp=database.utcnow(),
        upvotes=0,
        # Anonymous posters share one name, so it never identifies the uploader
        is_op=author != ANONYMOUS and author == parent.get("author"),
    ).model_dump(by_alias=True)

    # Guard on the id so a concurrent comment with the same id is never pushed twice
    result = resources.update_one(
        {"_id": _id, "comments.id": {"$ne": comment["id"]}},
        {
            "$push": {"comments": {"$each": [comment], "$position": 0}},
            "$set": {"updatedAt": database.utcnow()},
        },
    )
    if result.matched_count == 0:
        # Lost the race for this id; the thread now holds a newer one
        return add_comment(resource_id, author, text)

    logger.info(f"[Catalog] Comment {comment['id']} added to {resource_id}")
    return comment
