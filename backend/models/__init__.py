"""Models module - Pydantic data models"""

from .analysis import (
    AnalysisMode,
    AnalysisResult,
    AnalyzeRequest,
    AnalyzeResponse,
    Bug,
    ComplexityAnalysis,
    DebtIssue,
    FutureRisk,
    HackAnalysis,
    HackVulnerability,
    SafetyChecklistItem,
    SecurityIssue,
    SupportedLanguage,
    TechDebtAnalysis,
    TechDebtScore,
)
from .diff import DiffLine, DiffLineType, DiffRequest, DiffResult, DiffRow, DiffStats

__all__ = [
    # Analysis models
    "AnalysisMode",
    "AnalysisResult",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "Bug",
    "ComplexityAnalysis",
    "DebtIssue",
    "FutureRisk",
    "HackAnalysis",
    "HackVulnerability",
    "SafetyChecklistItem",
    "SecurityIssue",
    "SupportedLanguage",
    "TechDebtAnalysis",
    "TechDebtScore",
    # Diff models
    "DiffLine",
    "DiffLineType",
    "DiffRequest",
    "DiffResult",
    "DiffRow",
    "DiffStats",
]
