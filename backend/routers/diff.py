"""Diff API endpoints"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from models.diff import DiffRequest, DiffResult, DiffRow
from services.diff_generator import STRATEGIES, DiffGenerator, render_rows, render_text

router = APIRouter()
diff_generator = DiffGenerator()


def _generate(request: DiffRequest):
    if request.strategy not in STRATEGIES:
        raise HTTPException(status_code=400, detail=f"Unsupported diff strategy: {request.strategy}")
    return diff_generator.build_result(request.original, request.modified, request.strategy)


@router.post("", response_model=DiffResult)
async def compare(request: DiffRequest) -> DiffResult:
    """Align original and modified documents line by line"""
    return _generate(request)


@router.post("/rows", response_model=list[DiffRow])
async def compare_rows(request: DiffRequest) -> list[DiffRow]:
    """Two-column display rows with +/- markers"""
    return render_rows(_generate(request).lines)


@router.post("/text")
async def compare_text(request: DiffRequest) -> dict[str, str]:
    """Marker-prefixed plain-text rendering"""
    return {"text": render_text(_generate(request).lines)}
