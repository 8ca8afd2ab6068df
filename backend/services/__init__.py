"""Services module - Business logic layer"""

from .llm_service import LLMService, LLMServiceError
from .config_manager import ConfigManager
from .diff_generator import DiffGenerator, generate_diff
from .analysis_service import AnalysisError, AnalysisService

__all__ = [
    "LLMService",
    "LLMServiceError",
    "ConfigManager",
    "DiffGenerator",
    "generate_diff",
    "AnalysisError",
    "AnalysisService",
]
