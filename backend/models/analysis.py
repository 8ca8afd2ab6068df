"""Code analysis data models

Field names follow the camelCase keys of the model's JSON response so that
payloads validate without translation.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from .diff import DiffResult


class AnalysisMode(str, Enum):
    """Review persona and output focus"""

    BEGINNER = "Beginner"
    PRO = "Pro"
    INTERVIEW = "Interview"
    HACK_DEFEND = "Hack & Defend"
    TECH_DEBT = "Tech Debt"


class SupportedLanguage(str, Enum):
    """Languages offered for analysis"""

    PYTHON = "Python"
    JAVASCRIPT = "JavaScript"
    TYPESCRIPT = "TypeScript"
    JAVA = "Java"
    CPP = "C++"
    CSHARP = "C#"
    GO = "Go"
    PHP = "PHP"
    SQL = "SQL"


class Bug(BaseModel):
    line: int
    description: str
    severity: str  # "Critical", "Warning", "Info"


class SecurityIssue(BaseModel):
    vulnerability: str
    severity: str  # "High", "Medium", "Low"
    fix: str


class ComplexityAnalysis(BaseModel):
    """Big-O estimates"""

    time: str
    space: str
    explanation: str


class HackVulnerability(BaseModel):
    """A simulated attack vector and its defense"""

    name: str
    line: int
    exploitSteps: str
    impact: str
    payload: str
    patchExplanation: str
    defenseStrategy: str
    severity: str  # "Critical", "High", "Medium", "Low"
    isOfflineExploitable: bool = False
    isOnlineExploitable: bool = False


class SafetyChecklistItem(BaseModel):
    item: str
    status: str  # "Secure", "Vulnerable", "Patched", "Optimized", "Debt"


class HackAnalysis(BaseModel):
    """Hack & Defend mode section"""

    vulnerabilities: list[HackVulnerability] = []
    secureCode: str
    securityScore: int = Field(ge=0, le=100)
    safetyChecklist: list[SafetyChecklistItem] = []
    systemRiskRating: str | None = None  # "High", "Medium", "Low"
    attackSurfaceSummary: str | None = None
    exploitReadinessScore: int | None = None
    defenseReadinessScore: int | None = None


class TechDebtScore(BaseModel):
    maintainability: int
    readability: int
    scalability: int
    testability: int
    reliability: int
    overall: int


class DebtIssue(BaseModel):
    category: str
    line: int
    issue: str
    impact: str
    remediation: str
    severity: str  # "Critical", "High", "Medium"


class FutureRisk(BaseModel):
    prediction: str
    likelihood: str  # "High", "Medium", "Low"
    timeframe: str


class TechDebtAnalysis(BaseModel):
    """Tech Debt mode section"""

    scores: TechDebtScore
    issues: list[DebtIssue] = []
    refactoredCode: str
    risks: list[FutureRisk] = []
    refactorExplanation: str = ""
    engineeringChecklist: list[SafetyChecklistItem] = []


class AnalysisResult(BaseModel):
    """Structured analysis returned by the model"""

    bugs: list[Bug] = []
    rootCause: str
    fixedCode: str
    optimizedCode: str
    performanceSummary: str
    securityWarnings: list[SecurityIssue] = []
    complexity: ComplexityAnalysis
    refactoringSuggestions: list[str] = []
    hackAnalysis: HackAnalysis | None = None
    techDebtAnalysis: TechDebtAnalysis | None = None


class AnalyzeRequest(BaseModel):
    """Request for code analysis"""

    code: str
    language: SupportedLanguage = SupportedLanguage.JAVASCRIPT
    mode: AnalysisMode = AnalysisMode.PRO


class AnalyzeResponse(BaseModel):
    """Analysis plus the diff of the input against the mode's modified code"""

    result: AnalysisResult
    modifiedCode: str
    diff: DiffResult
    highlightedLines: list[int] = []
