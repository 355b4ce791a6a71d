"""
Database Schemas for the UniArchive academic resource catalog

Each Pydantic model represents a MongoDB collection. The collection name is the
lowercase of the class name. Documents are stored with camelCase keys, the same
shape the web client reads.

Collections:
- Resource: shared study material with an embedded comment thread
- Coursestats: precomputed per-course coverage snapshots (read-only to the API)
- Otp: one pending verification code per email
"""

from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal
from datetime import datetime

ResourceType = Literal["Notes", "Question Bank", "Cheatsheet", "Lab Report", "Solution"]

RESOURCE_TYPES = ("Notes", "Question Bank", "Cheatsheet", "Lab Report", "Solution")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Comment(CamelModel):
    """Flat reply embedded in a resource, newest first"""
    id: str = Field(..., description="Creation-time derived id, unique within the resource")
    author: str = Field("Anonymous", description="Display name of the commenter")
    text: str = Field(..., min_length=1, description="Comment body")
    timestamp: datetime = Field(..., description="Creation time")
    upvotes: int = Field(0, description="Comment upvote counter")
    is_op: bool = Field(False, description="True when the commenter authored the resource")


class Resource(CamelModel):
    """Academic resources uploaded by students"""
    title: str = Field(..., min_length=1, description="Resource title")
    course_code: str = Field(..., min_length=1, description="Course code, stored uppercase")
    slot: str = Field(..., min_length=1, description="Timetable slot, stored uppercase")
    type: ResourceType = Field(..., description="Resource kind")
    topics: List[str] = Field(default_factory=list, description="Free-text topic tags")
    quality_score: int = Field(0, ge=0, le=100, description="Derived quality ranking")
    completeness: int = Field(50, ge=0, le=100, description="Self-reported syllabus coverage")
    upvotes: int = 0
    downloads: int = Field(0, ge=0)
    views: int = Field(0, ge=0)
    author: str = Field("Anonymous", description="Uploader display name")
    professor: Optional[str] = None
    semester: Optional[str] = None
    year: Optional[str] = None
    description: Optional[str] = None
    pdf_url: str = Field(..., description="URL of the stored file")
    comments: List[Comment] = Field(default_factory=list)


class TopicCoverage(CamelModel):
    topic: str
    coverage: int = Field(..., ge=0, le=100)


class Coursestats(CamelModel):
    """Per-course coverage snapshot, populated by seed.py"""
    course_code: str = Field(..., description="Unique course code")
    completeness: int = Field(0, ge=0, le=100)
    quality_avg: int = Field(0, ge=0, le=100)
    total_resources: int = Field(0, ge=0)
    topic_coverage: List[TopicCoverage] = Field(default_factory=list)
    activity_grid: List[int] = Field(default_factory=list, description="Daily intensity levels 0-4")

    @field_validator("activity_grid")
    @classmethod
    def levels_in_range(cls, v: List[int]) -> List[int]:
        if any(level < 0 or level > 4 for level in v):
            raise ValueError("activity levels must be between 0 and 4")
        return v


class Otp(CamelModel):
    """Pending verification code, one per email"""
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6)
    created_at: datetime
    expires_at: datetime


# ----------------------
# Request payloads
# ----------------------

class ResourceCreate(CamelModel):
    """Metadata sent alongside an upload (the multipart `data` field).

    Counters, qualityScore and comments are never taken from the client.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    slot: str = Field(..., min_length=1)
    type: ResourceType
    topics: List[str] = Field(default_factory=list)
    completeness: int = Field(50, ge=0, le=100)
    author: Optional[str] = None
    professor: Optional[str] = None
    semester: Optional[str] = None
    year: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title", "course_code", "slot", mode="before")
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("topics")
    @classmethod
    def drop_blank_topics(cls, v: List[str]) -> List[str]:
        return [t.strip() for t in v if t and t.strip()]


class CommentCreate(BaseModel):
    text: str = ""
    author: Optional[str] = None


class OtpRequest(BaseModel):
    email: str = ""


class OtpVerifyRequest(BaseModel):
    email: str = ""
    otp: str = ""


class AskRequest(BaseModel):
    query: Optional[str] = None
