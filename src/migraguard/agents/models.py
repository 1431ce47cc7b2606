"""Data models for sub-agent tasks, results, and per-agent response schemas."""

from __future__ import annotations

import enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AgentType(str, enum.Enum):
    RESEARCH = "research"
    SECURITY_SCAN = "security-scan"
    TEST_GENERATOR = "test-generator"
    REFACTOR_ANALYZER = "refactor-analyzer"
    DOCUMENTATION_WRITER = "documentation-writer"


class AgentTask(BaseModel):
    """One unit of delegated work. `timeout` on the wire, in milliseconds."""

    model_config = ConfigDict(populate_by_name=True)

    type: AgentType
    prompt: str = Field(min_length=1)
    timeout_ms: int | None = Field(default=None, gt=0, alias="timeout")


class BatchRequest(BaseModel):
    agents: list[AgentTask] = Field(default_factory=list)


class AgentResult(BaseModel):
    """Outcome of exactly one AgentTask."""

    type: AgentType
    success: bool
    response: dict[str, Any] | None = None
    error: str | None = None
    timed_out: bool = False
    elapsed_ms: int = 0

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value, "success": self.success}
        if self.success:
            data["response"] = self.response
        else:
            data["error"] = self.error
        if self.timed_out:
            data["timedOut"] = True
        data["elapsedMs"] = self.elapsed_ms
        return data


def batch_response(results: list[AgentResult]) -> dict[str, Any]:
    return {
        "success": all(r.success for r in results),
        "agents": [r.to_wire() for r in results],
    }


# -- research ------------------------------------------------------------------


class KeyFinding(BaseModel):
    finding: str
    source: Literal["internal", "external"] = "internal"
    location: str = ""
    reference: str | None = None


class Recommendation(BaseModel):
    action: str
    rationale: str = ""


class CodeLocation(BaseModel):
    file: str
    line: int | None = None
    purpose: str = ""


class ExternalReference(BaseModel):
    library: str
    topic: str = ""
    url: str = ""


class ResearchResponse(BaseModel):
    key_findings: list[KeyFinding]
    architecture_patterns: list[str]
    recommendations: list[Recommendation]
    code_locations: list[CodeLocation]
    external_references: list[ExternalReference] = Field(default_factory=list)
    research_depth: Literal["shallow", "deep"] = "shallow"
    confidence: Literal["high", "medium", "low"]


# -- security-scan -------------------------------------------------------------

Severity = Literal["critical", "high", "medium", "low"]


class SecurityFinding(BaseModel):
    severity: Severity
    category: str
    file: str
    line: int | None = None
    description: str
    remediation: str


class SeveritySummary(BaseModel):
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class SecurityScanResponse(BaseModel):
    findings: list[SecurityFinding]
    summary: SeveritySummary
    recommendations: list[str]
    scan_coverage: dict[str, Any]


# -- test-generator ------------------------------------------------------------


class GeneratedTest(BaseModel):
    file: str
    description: str = ""
    content: str


class GeneratedTestsResponse(BaseModel):
    tests: list[GeneratedTest]
    coverage_strategy: str
    test_count: int = Field(ge=0)
    estimated_coverage: str | float


# -- refactor-analyzer ---------------------------------------------------------


class RefactorOpportunity(BaseModel):
    priority: Literal["high", "medium", "low"]
    type: str
    file: str
    line: int | None = None
    issue: str
    suggestion: str


class CodeMetrics(BaseModel):
    model_config = ConfigDict(extra="allow")

    avg_complexity: float


class RefactorResponse(BaseModel):
    opportunities: list[RefactorOpportunity]
    code_smells: list[str]
    metrics: CodeMetrics
    priority_order: list[str]


# -- documentation-writer ------------------------------------------------------


class DocumentationFile(BaseModel):
    file: str
    section: str = ""
    content: str


class DocumentationResponse(BaseModel):
    documentation: list[DocumentationFile]
    preview: str


RESPONSE_SCHEMAS: dict[AgentType, type[BaseModel]] = {
    AgentType.RESEARCH: ResearchResponse,
    AgentType.SECURITY_SCAN: SecurityScanResponse,
    AgentType.TEST_GENERATOR: GeneratedTestsResponse,
    AgentType.REFACTOR_ANALYZER: RefactorResponse,
    AgentType.DOCUMENTATION_WRITER: DocumentationResponse,
}
