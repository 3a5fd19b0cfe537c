"""
Back-office document gateway — FastAPI backend.

Thin request handlers over the SQLite repository; the only real work is
handing a stored record to the rendering engine on demand.

Endpoints
---------
  GET    /api/health                              → liveness probe
  GET    /api/business                            → caller's business profile (created on first use)
  PUT    /api/business                            → replace the business profile
  GET    /api/{collection}                        → list summaries
  POST   /api/{collection}                        → store a new record
  GET    /api/{collection}/{doc_id}               → one full record
  DELETE /api/{collection}/{doc_id}               → delete a record
  GET    /api/{collection}/{doc_id}/export        → rendered PDF / DOCX download
         ?format=pdf|word&includeHeader=…&includeFooter=…

  collection ∈ quotations | invoices | delivery-challans

Every /api route except /api/health requires a session; the X-User-Id header
stands in for the session cookie of the auth layer.
"""
import json
import logging
import sqlite3
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.responses import Response
from pydantic import ValidationError

from api.models import BusinessUpdate, DocumentCreated
from api.services.export import COLLECTIONS, build_render_options, content_disposition, parse_flag
from config import Config
from docgen.database import Database
from docgen.dispatch import OUTPUT_FORMATS, DocumentGenerationError, render_document
from models import Business, load_record

logger = logging.getLogger(__name__)

config = Config()

# ---------------------------------------------------------------------------
# Database (opened lazily on first request)
# ---------------------------------------------------------------------------
_db: Optional[Database] = None


def get_db() -> Database:
    global _db
    if _db is None:
        _db = Database(config.db_path)
    return _db


def current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Resolve the signed-in user; 401 when there is no session."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


def _kind_for(collection: str) -> str:
    kind = COLLECTIONS.get(collection)
    if kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")
    return kind


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(title="Back-office Documents", docs_url=None, redoc_url=None)


@app.get("/api/health")
def health(db: Database = Depends(get_db)):
    return {
        "status":    "ok",
        "db_path":   str(db.db_path),
        "db_exists": db.db_path.exists(),
    }


# ── Business profile ─────────────────────────────────────────────────────────

@app.get("/api/business")
def get_business(user_id: str = Depends(current_user), db: Database = Depends(get_db)):
    return db.get_or_create_business(user_id).model_dump()


@app.put("/api/business")
def update_business(
    body: BusinessUpdate,
    user_id: str = Depends(current_user),
    db: Database = Depends(get_db),
):
    business = Business(**body.model_dump())
    db.save_business(user_id, business)
    logger.info("Business profile updated for user %s", user_id)
    return business.model_dump()


# ── Documents ────────────────────────────────────────────────────────────────

@app.get("/api/{collection}")
def list_documents(
    collection: str,
    limit: int = Query(default=500, ge=1, le=2000),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(current_user),
    db: Database = Depends(get_db),
):
    return db.list_documents(user_id, _kind_for(collection), limit=limit, offset=offset)


@app.post("/api/{collection}", status_code=201, response_model=DocumentCreated)
def create_document(
    collection: str,
    payload: dict,
    user_id: str = Depends(current_user),
    db: Database = Depends(get_db),
):
    kind = _kind_for(collection)
    try:
        record = load_record(kind, payload)
        doc_id = db.create_document(user_id, kind, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=json.loads(exc.json(include_url=False)))
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=409, detail=f"Document already exists: {payload.get('id')}")
    return DocumentCreated(id=doc_id, kind=kind, document_number=record.document_number)


@app.get("/api/{collection}/{doc_id}")
def get_document(
    collection: str,
    doc_id: str,
    user_id: str = Depends(current_user),
    db: Database = Depends(get_db),
):
    kind = _kind_for(collection)
    record = db.get_document(user_id, kind, doc_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Document not found: {doc_id}")
    return record.model_dump(mode="json")


@app.delete("/api/{collection}/{doc_id}")
def delete_document(
    collection: str,
    doc_id: str,
    user_id: str = Depends(current_user),
    db: Database = Depends(get_db),
):
    kind = _kind_for(collection)
    if not db.delete_document(user_id, kind, doc_id):
        raise HTTPException(status_code=404, detail=f"Document not found: {doc_id}")
    logger.info("Deleted %s %s", kind, doc_id)
    return {"id": doc_id, "deleted": True}


@app.get("/api/{collection}/{doc_id}/export")
def export_document(
    collection: str,
    doc_id: str,
    format: str = Query(default="pdf"),
    include_header: Optional[str] = Query(default=None, alias="includeHeader"),
    include_footer: Optional[str] = Query(default=None, alias="includeFooter"),
    user_id: str = Depends(current_user),
    db: Database = Depends(get_db),
):
    """
    Render a stored record as PDF or Word.

    Branding comes from the caller's business profile; header and footer
    are included unless the matching flag is the literal string 'false'.
    """
    kind = _kind_for(collection)
    if format not in OUTPUT_FORMATS:
        raise HTTPException(status_code=400, detail=f"format must be one of: {', '.join(OUTPUT_FORMATS)}")

    record = db.get_document(user_id, kind, doc_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Document not found: {doc_id}")

    options = build_render_options(
        db.get_or_create_business(user_id),
        include_header=parse_flag(include_header),
        include_footer=parse_flag(include_footer),
        default_color=config.primary_color,
    )

    try:
        rendered = render_document(record, kind, format, options)
    except DocumentGenerationError:
        logger.exception("Document generation failed for %s %s", kind, doc_id)
        raise HTTPException(status_code=500, detail="Failed to generate document")

    logger.info("Exported %s %s as %s (%d bytes)", kind, record.document_number, format, len(rendered.content))
    return Response(
        content=rendered.content,
        media_type=rendered.media_type,
        headers={"Content-Disposition": content_disposition(rendered.filename)},
    )
