import logging
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, File, Query, Request, Response, UploadFile
from fastapi.responses import JSONResponse

from .codec import Table
from .config import get_settings
from .errors import SanitizerError
from .models import (
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    PreviewResponse,
    PreviewRow,
    ProcessResponse,
    SessionStatus,
    SourceSummary,
)
from .session import Session

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="forbidden-word-remover",
    description="Remove forbidden words from the product name column of a CSV",
    version="0.1.0",
)

session = Session(max_upload_bytes=settings.max_upload_bytes)


def get_session() -> Session:
    return session


@app.exception_handler(SanitizerError)
async def sanitizer_error_handler(request: Request, exc: SanitizerError) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def _summary(table: Table, terms=None) -> dict:
    return {
        "filename": table.filename,
        "encoding": table.encoding,
        "fields": list(table.fields),
        "rows": len(table),
        "terms": terms,
        "warnings": list(table.warnings),
    }


def _preview_rows(pairs) -> list:
    return [PreviewRow(original=original, cleaned=cleaned) for original, cleaned in pairs]


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/forbidden-words", response_model=SourceSummary)
async def upload_forbidden_words(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    raw = await file.read()
    table = session.load_forbidden(raw, file.filename)
    return _summary(table, terms=len(session.state.terms))


@app.post("/products", response_model=SourceSummary)
async def upload_products(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    raw = await file.read()
    table = session.load_products(raw, file.filename)
    return _summary(table)


@app.post("/process", response_model=ProcessResponse)
def process(session: Session = Depends(get_session)):
    processed = session.process()
    return ProcessResponse(
        rows=len(processed),
        terms=len(session.state.terms),
        preview=_preview_rows(session.preview(settings.preview_limit)),
    )


@app.get("/preview", response_model=PreviewResponse)
def preview(
    limit: Optional[int] = Query(default=None, ge=1),
    session: Session = Depends(get_session),
):
    state = session.state
    rows = state.processed if state.processed is not None else state.product_records
    return PreviewResponse(
        processed=state.processed is not None,
        total=len(rows),
        rows=_preview_rows(session.preview(limit or settings.preview_limit)),
    )


@app.get("/export")
def export(session: Session = Depends(get_session)):
    filename, content = session.export()
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@app.get("/session", response_model=SessionStatus)
def session_status(session: Session = Depends(get_session)):
    state = session.state
    return SessionStatus(
        forbidden_file=state.forbidden.filename if state.forbidden else None,
        terms=len(state.terms),
        product_file=state.products.filename if state.products else None,
        product_rows=len(state.product_records),
        processed_rows=len(state.processed) if state.processed is not None else None,
        error=session.error,
    )


@app.delete("/session", response_model=SessionStatus)
def reset_session(session: Session = Depends(get_session)):
    session.reset()
    return SessionStatus()
