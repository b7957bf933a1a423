from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class SourceSummary(BaseModel):
    filename: Optional[str] = None
    encoding: Optional[str] = None
    fields: List[str] = Field(default_factory=list)
    rows: int = 0
    terms: Optional[int] = Field(default=None, examples=[None])
    warnings: List[ReportItem] = Field(default_factory=list)


class PreviewRow(BaseModel):
    original: str
    cleaned: str


class PreviewResponse(BaseModel):
    processed: bool
    total: int
    rows: List[PreviewRow] = Field(default_factory=list)


class ProcessResponse(BaseModel):
    rows: int
    terms: int
    preview: List[PreviewRow] = Field(default_factory=list)


class SessionStatus(BaseModel):
    forbidden_file: Optional[str] = None
    terms: int = 0
    product_file: Optional[str] = None
    product_rows: int = 0
    processed_rows: Optional[int] = None
    error: Optional[str] = None


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    ok: bool = True
