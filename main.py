import json
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional, Dict, Any

from fastapi import FastAPI, File, Form, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

import assistant
import catalog
import database
import otp
import stats
import uploads
from config import settings
from exceptions import CatalogError, ValidationError
from logging_config import logger
from schemas import CommentCreate, OtpRequest, OtpVerifyRequest, AskRequest


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is not None:
        database.ensure_indexes()
    logger.info(f"[App] {settings.APP_NAME} started ({settings.ENVIRONMENT})")
    yield


app = FastAPI(title="UniArchive API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/uploads", StaticFiles(directory=str(uploads.upload_dir())), name="uploads")


# ----------------------
# Utilities
# ----------------------

def _clean_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _clean_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_clean_value(v) for v in value]
    return value


def clean(doc: Dict[str, Any]):
    if not doc:
        return doc
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    # Convert datetimes (including embedded comments) to isoformat
    return _clean_value(doc)


# ----------------------
# Error mapping
# ----------------------

@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error(f"[App] {request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{loc}: {first.get('msg')}" if loc else first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"[App] Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# ----------------------
# Resources
# ----------------------

@app.get("/api/resources")
def list_resources(
    type: Optional[str] = Query(None),
    slot: Optional[str] = Query(None),
    course: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
):
    docs = catalog.list_resources(type=type, slot=slot, course=course, search=search)
    return [clean(d) for d in docs]


@app.get("/api/resources/{resource_id}")
def get_resource(resource_id: str):
    return clean(catalog.get_resource(resource_id))


@app.post("/api/resources", status_code=201)
def create_resource(
    request: Request,
    file: Optional[UploadFile] = File(None),
    data: Optional[str] = Form(None),
):
    if file is None or not file.filename:
        raise ValidationError("No file uploaded", field="file")

    uploads.validate_upload(file)
    try:
        metadata = json.loads(data) if data else None
    except json.JSONDecodeError:
        raise ValidationError("Resource metadata is not valid JSON", field="data")
    if metadata is None:
        raise ValidationError("Resource metadata is required", field="data")
    meta = catalog.parse_metadata(metadata)

    filename = uploads.save_upload(file)
    file_url = f"{str(request.base_url).rstrip('/')}/uploads/{filename}"
    try:
        doc = catalog.create_resource(meta, file_url)
    except Exception:
        uploads.remove_upload(filename)
        raise
    return clean(doc)


@app.post("/api/resources/{resource_id}/comments", status_code=201)
def add_comment(resource_id: str, payload: CommentCreate):
    return clean(catalog.add_comment(resource_id, payload.author, payload.text))


@app.post("/api/resources/{resource_id}/{action}")
def update_interaction(resource_id: str, action: str):
    value = catalog.record_interaction(resource_id, action)
    return {"success": True, catalog.counter_key(action): value}


# ----------------------
# Stats
# ----------------------

@app.get("/api/stats")
def get_stats():
    return {
        "courseStats": [clean(d) for d in stats.get_course_stats()],
        "topSlots": stats.get_top_slots(),
    }


# ----------------------
# AI assistant
# ----------------------

@app.post("/api/ai/ask")
def ask_ai(payload: AskRequest):
    return {"answer": assistant.ask(payload.query)}


# ----------------------
# OTP auth
# ----------------------

@app.post("/api/auth/otp")
def send_otp(payload: OtpRequest):
    otp.request_otp(payload.email)
    return {"message": "OTP sent successfully"}


@app.post("/api/auth/verify")
def verify_otp(payload: OtpVerifyRequest):
    otp.verify_otp(payload.email, payload.otp)
    return {"success": True, "message": "Verification successful"}


# ----------------------
# Meta & health
# ----------------------
@app.get("/")
def read_root():
    return {"message": "UniArchive API is running..."}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        if database.db is not None:
            response["database"] = "✅ Available"
            response["database_url"] = "✅ Set" if settings.DATABASE_URL else "❌ Not Set"
            response["database_name"] = "✅ Set" if settings.DATABASE_NAME else "❌ Not Set"
            response["connection_status"] = "Connected"
            try:
                collections = database.db.list_collection_names()
                response["collections"] = collections[:10]
                response["database"] = "✅ Connected & Working"
            except Exception as e:
                response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
        else:
            response["database"] = "⚠️  Available but not initialized"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"
    return response


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
