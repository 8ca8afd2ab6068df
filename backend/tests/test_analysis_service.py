"""Tests for analysis prompt/schema construction and result handling."""

from __future__ import annotations

import pytest

from models.analysis import AnalysisMode, AnalysisResult, SupportedLanguage
from services.analysis_service import (
    AnalysisError,
    AnalysisService,
    build_response_schema,
    build_system_prompt,
    highlighted_lines,
    modified_code_for,
)


class FakeLLMService:
    """Records generate_json calls and returns a canned payload."""

    def __init__(self, payload: dict) -> None:
        self.payload = payload
        self.calls: list[dict] = []

    async def generate_json(self, prompt, system_instruction=None, response_schema=None):
        self.calls.append(
            {"prompt": prompt, "system_instruction": system_instruction, "response_schema": response_schema}
        )
        return self.payload


def hack_section() -> dict:
    return {
        "vulnerabilities": [
            {
                "name": "SQL Injection",
                "line": 4,
                "exploitSteps": "Send a crafted id",
                "impact": "Data leak",
                "payload": "1 OR 1=1",
                "patchExplanation": "Use parameters",
                "defenseStrategy": "Prepared statements everywhere",
                "severity": "Critical",
            }
        ],
        "secureCode": "cursor.execute('SELECT * FROM users WHERE id = ?', (uid,))",
        "securityScore": 90,
        "safetyChecklist": [{"item": "Input Sanitization", "status": "Patched"}],
    }


def debt_section() -> dict:
    return {
        "scores": {
            "maintainability": 40,
            "readability": 55,
            "scalability": 30,
            "testability": 20,
            "reliability": 60,
            "overall": 41,
        },
        "issues": [
            {
                "category": "Coupling",
                "line": 7,
                "issue": "Global state",
                "impact": "Hard to test",
                "remediation": "Inject dependency",
                "severity": "High",
            }
        ],
        "refactoredCode": "def total(xs):\n    return sum(xs)",
        "risks": [{"prediction": "Regressions", "likelihood": "High", "timeframe": "3 months"}],
        "refactorExplanation": "Removed manual loop",
        "engineeringChecklist": [{"item": "Unit tests", "status": "Debt"}],
    }


class TestPromptAndSchema:
    def test_system_prompt_names_language_and_mode(self):
        prompt = build_system_prompt(SupportedLanguage.PYTHON, AnalysisMode.INTERVIEW)
        assert "Language: Python" in prompt
        assert "Mode: Interview" in prompt
        assert "Hack & Defend:" in prompt

    def test_base_schema_has_no_mode_sections(self):
        schema = build_response_schema(AnalysisMode.PRO)
        assert "fixedCode" in schema["required"]
        assert "hackAnalysis" not in schema["properties"]
        assert "techDebtAnalysis" not in schema["properties"]

    def test_hack_mode_requires_hack_analysis(self):
        schema = build_response_schema(AnalysisMode.HACK_DEFEND)
        assert "hackAnalysis" in schema["required"]
        hack = schema["properties"]["hackAnalysis"]
        assert hack["required"] == ["vulnerabilities", "secureCode", "securityScore", "safetyChecklist"]

    def test_tech_debt_mode_requires_tech_debt_analysis(self):
        schema = build_response_schema(AnalysisMode.TECH_DEBT)
        assert "techDebtAnalysis" in schema["required"]
        debt = schema["properties"]["techDebtAnalysis"]
        assert set(debt["properties"]["scores"]["required"]) == {
            "maintainability", "readability", "scalability", "testability", "reliability", "overall",
        }


class TestResultHelpers:
    def test_standard_mode_uses_fixed_code(self, analysis_payload):
        result = AnalysisResult.model_validate(analysis_payload)
        assert modified_code_for(result, AnalysisMode.PRO) == analysis_payload["fixedCode"]
        assert highlighted_lines(result, AnalysisMode.PRO) == [3]

    def test_hack_mode_uses_secure_code(self, analysis_payload):
        result = AnalysisResult.model_validate({**analysis_payload, "hackAnalysis": hack_section()})
        assert modified_code_for(result, AnalysisMode.HACK_DEFEND) == hack_section()["secureCode"]
        assert highlighted_lines(result, AnalysisMode.HACK_DEFEND) == [4]

    def test_tech_debt_mode_uses_refactored_code(self, analysis_payload):
        result = AnalysisResult.model_validate({**analysis_payload, "techDebtAnalysis": debt_section()})
        assert modified_code_for(result, AnalysisMode.TECH_DEBT) == debt_section()["refactoredCode"]
        assert highlighted_lines(result, AnalysisMode.TECH_DEBT) == [7]

    def test_missing_mode_section_falls_back_to_fixed_code(self, analysis_payload):
        result = AnalysisResult.model_validate(analysis_payload)
        assert modified_code_for(result, AnalysisMode.HACK_DEFEND) == analysis_payload["fixedCode"]


class TestAnalysisService:
    @pytest.mark.asyncio
    async def test_analyze_sends_prompt_and_schema(self, analysis_payload):
        llm = FakeLLMService(analysis_payload)
        result = await AnalysisService(llm).analyze("x = 1", SupportedLanguage.GO, AnalysisMode.BEGINNER)

        assert result.bugs[0].severity == "Critical"
        call = llm.calls[0]
        assert call["prompt"].endswith("x = 1")
        assert "Language: Go" in call["system_instruction"]
        assert call["response_schema"]["type"] == "OBJECT"

    @pytest.mark.asyncio
    async def test_blank_code_rejected(self, analysis_payload):
        llm = FakeLLMService(analysis_payload)
        with pytest.raises(ValueError):
            await AnalysisService(llm).analyze("   \n", SupportedLanguage.PYTHON, AnalysisMode.PRO)
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_malformed_payload_raises_analysis_error(self):
        llm = FakeLLMService({"bugs": "not a list"})
        with pytest.raises(AnalysisError):
            await AnalysisService(llm).analyze("x = 1", SupportedLanguage.PYTHON, AnalysisMode.PRO)
