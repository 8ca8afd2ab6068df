"""
Analysis Service - Prompt and schema construction for code analysis
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from models.analysis import AnalysisMode, AnalysisResult, SupportedLanguage
from .llm_service import LLMService

logger = logging.getLogger(__name__)

MODE_BEHAVIOR = {
    AnalysisMode.BEGINNER: "Explain simply, define terms, be encouraging but clear.",
    AnalysisMode.PRO: "Direct technical review, concise, dense information.",
    AnalysisMode.INTERVIEW: (
        "In the 'rootCause' field, ask guiding questions or give hints instead of giving "
        "the answer directly. However, YOU MUST STILL PROVIDE THE FIX in 'fixedCode' and "
        "'optimizedCode' fields."
    ),
    AnalysisMode.HACK_DEFEND: (
        "Act as a certified ethical hacker and senior app security engineer. Focus entirely "
        "on security exploitation and defense. Identify ALL attack vectors (SQLi, XSS, etc.), "
        "simulate exploits, and provide robust defense strategies."
    ),
    AnalysisMode.TECH_DEBT: (
        "Act as a principal engineer auditing maintainability. Score the code on "
        "maintainability, readability, scalability, testability and reliability (0-100), "
        "trace each debt source to a line, predict future risks, and provide a refactored version."
    ),
}


class AnalysisError(Exception):
    """Model output could not be used as an analysis"""


# ========== Schema Helpers ==========


def _string(description: str | None = None, enum: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "STRING"}
    if description:
        schema["description"] = description
    if enum:
        schema["enum"] = enum
    return schema


def _integer(description: str | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "INTEGER"}
    if description:
        schema["description"] = description
    return schema


def _object(properties: dict[str, Any], description: str | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "OBJECT",
        "properties": properties,
        "required": list(properties),
    }
    if description:
        schema["description"] = description
    return schema


def _array(items: dict[str, Any]) -> dict[str, Any]:
    return {"type": "ARRAY", "items": items}


def _checklist(statuses: list[str]) -> dict[str, Any]:
    return _array(_object({"item": _string("Checklist item (e.g., 'Input Sanitization')"), "status": _string(enum=statuses)}))


def _base_properties() -> dict[str, Any]:
    return {
        "bugs": _array(_object({
            "line": _integer("Line number of the bug"),
            "description": _string("Short description of the bug"),
            "severity": _string(enum=["Critical", "Warning", "Info"]),
        })),
        "rootCause": _string("Detailed explanation of why the bugs happen."),
        "fixedCode": _string("The code with bugs fixed."),
        "optimizedCode": _string("A cleaner, performance-optimized version of the code."),
        "performanceSummary": _string("Summary of performance improvements."),
        "securityWarnings": _array(_object({
            "vulnerability": _string(),
            "severity": _string(enum=["High", "Medium", "Low"]),
            "fix": _string("How to fix the security issue"),
        })),
        "complexity": _object({
            "time": _string("Time complexity (Big O)"),
            "space": _string("Space complexity (Big O)"),
            "explanation": _string("Brief explanation of complexity"),
        }),
        "refactoringSuggestions": _array(_string()),
    }


def _hack_analysis_schema() -> dict[str, Any]:
    vulnerability = _object({
        "name": _string("Name of the attack vector"),
        "line": _integer("Line number where vulnerability exists"),
        "exploitSteps": _string("Step-by-step guide on how a hacker would exploit this"),
        "impact": _string("Potential damage (data leak, takeover, etc.)"),
        "payload": _string("Realistic example payload used in attack"),
        "patchExplanation": _string("Explanation of the secure patch"),
        "defenseStrategy": _string("Long-term defense strategy"),
        "severity": _string(enum=["Critical", "High", "Medium", "Low"]),
        "isOfflineExploitable": {"type": "BOOLEAN"},
        "isOnlineExploitable": {"type": "BOOLEAN"},
    })
    schema = _object(
        {
            "vulnerabilities": _array(vulnerability),
            "secureCode": _string("Fully secured version of the code with all protections applied"),
            "securityScore": _integer("Security score from 0 to 100 after patching"),
            "safetyChecklist": _checklist(["Secure", "Vulnerable", "Patched"]),
            "systemRiskRating": _string(enum=["High", "Medium", "Low"]),
            "attackSurfaceSummary": _string("Summary of the exposed attack surface"),
            "exploitReadinessScore": _integer("How ready the code is to be exploited, 0 to 100"),
            "defenseReadinessScore": _integer("How well defended the code is, 0 to 100"),
        },
        description="Detailed ethical hacking analysis and defense strategy",
    )
    schema["required"] = ["vulnerabilities", "secureCode", "securityScore", "safetyChecklist"]
    return schema


def _tech_debt_schema() -> dict[str, Any]:
    score = _integer("Score from 0 to 100")
    return _object(
        {
            "scores": _object({
                "maintainability": score,
                "readability": score,
                "scalability": score,
                "testability": score,
                "reliability": score,
                "overall": score,
            }),
            "issues": _array(_object({
                "category": _string("Debt category (e.g., 'Coupling')"),
                "line": _integer("Line number of the debt source"),
                "issue": _string(),
                "impact": _string(),
                "remediation": _string(),
                "severity": _string(enum=["Critical", "High", "Medium"]),
            })),
            "refactoredCode": _string("Refactored version of the code paying down the debt"),
            "risks": _array(_object({
                "prediction": _string(),
                "likelihood": _string(enum=["High", "Medium", "Low"]),
                "timeframe": _string(),
            })),
            "refactorExplanation": _string("Explanation of the refactoring"),
            "engineeringChecklist": _checklist(["Optimized", "Debt"]),
        },
        description="Technical debt scoring and refactoring plan",
    )


# ========== Prompt / Schema Builders ==========


def build_system_prompt(language: SupportedLanguage, mode: AnalysisMode) -> str:
    """Build the reviewer persona and per-mode instructions"""
    behavior = "\n".join(f"  - {m.value}: {text}" for m, text in MODE_BEHAVIOR.items())
    return (
        "You are FixMyCode AI, a world-class senior software engineer, security analyst, "
        "and performance optimizer.\n"
        "Your goal is to be fast, brutally honest, and developer-first. Zero fluff.\n\n"
        f"Language: {language.value}\n"
        f"Mode: {mode.value}\n\n"
        "Modes Behavior:\n"
        f"{behavior}"
    )


def build_response_schema(mode: AnalysisMode) -> dict[str, Any]:
    """Build the response schema; mode sections are required in their mode only"""
    properties = _base_properties()
    if mode == AnalysisMode.HACK_DEFEND:
        properties["hackAnalysis"] = _hack_analysis_schema()
    elif mode == AnalysisMode.TECH_DEBT:
        properties["techDebtAnalysis"] = _tech_debt_schema()
    return _object(properties)


def build_user_prompt(code: str) -> str:
    return f"Analyze the following code:\n\n{code}"


# ========== Result Helpers ==========


def modified_code_for(result: AnalysisResult, mode: AnalysisMode) -> str:
    """Code compared against the input for the given mode"""
    if mode == AnalysisMode.HACK_DEFEND and result.hackAnalysis:
        return result.hackAnalysis.secureCode
    if mode == AnalysisMode.TECH_DEBT and result.techDebtAnalysis:
        return result.techDebtAnalysis.refactoredCode
    return result.fixedCode


def highlighted_lines(result: AnalysisResult, mode: AnalysisMode) -> list[int]:
    """Input lines to flag in the editor for the given mode"""
    if mode == AnalysisMode.HACK_DEFEND and result.hackAnalysis:
        return [v.line for v in result.hackAnalysis.vulnerabilities]
    if mode == AnalysisMode.TECH_DEBT and result.techDebtAnalysis:
        return [issue.line for issue in result.techDebtAnalysis.issues]
    return [bug.line for bug in result.bugs]


class AnalysisService:
    """Run a single code analysis against the configured provider"""

    def __init__(self, llm_service: LLMService):
        self.llm_service = llm_service

    async def analyze(
        self,
        code: str,
        language: SupportedLanguage,
        mode: AnalysisMode,
    ) -> AnalysisResult:
        if not code.strip():
            raise ValueError("No code provided for analysis")

        logger.info("[Analyze] %s analysis of %d chars of %s", mode.value, len(code), language.value)
        data = await self.llm_service.generate_json(
            build_user_prompt(code),
            system_instruction=build_system_prompt(language, mode),
            response_schema=build_response_schema(mode),
        )

        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            logger.error("[Analyze] Model returned an unusable analysis: %s", e)
            raise AnalysisError(f"Malformed analysis from model: {e.error_count()} invalid field(s)") from e
