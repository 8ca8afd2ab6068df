"""Code analysis API endpoints"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from models.analysis import AnalyzeRequest, AnalyzeResponse
from services.analysis_service import (
    AnalysisError,
    AnalysisService,
    highlighted_lines,
    modified_code_for,
)
from services.config_manager import ConfigManager
from services.diff_generator import DiffGenerator
from services.llm_service import LLMService, LLMServiceError

logger = logging.getLogger(__name__)

router = APIRouter()
diff_generator = DiffGenerator()


@router.post("", response_model=AnalyzeResponse)
async def analyze_code(request: AnalyzeRequest) -> AnalyzeResponse:
    """Analyze code and diff it against the mode's modified version"""
    config = ConfigManager.get_instance().get_config()
    service = AnalysisService(LLMService(config))

    try:
        result = await service.analyze(request.code, request.language, request.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (LLMServiceError, AnalysisError) as e:
        raise HTTPException(status_code=502, detail=str(e))

    modified = modified_code_for(result, request.mode)

    return AnalyzeResponse(
        result=result,
        modifiedCode=modified,
        diff=diff_generator.build_result(request.code, modified),
        highlightedLines=highlighted_lines(result, request.mode),
    )
