"""Sub-agent orchestration: typed tasks, an LLM backend, and batch execution."""

from migraguard.agents.backend import LLMBackend, LLMError, LLMResponse, OpenAICompatBackend
from migraguard.agents.models import AgentResult, AgentTask, AgentType, BatchRequest
from migraguard.agents.orchestrator import run_batch, run_task

__all__ = [
    "AgentResult",
    "AgentTask",
    "AgentType",
    "BatchRequest",
    "LLMBackend",
    "LLMError",
    "LLMResponse",
    "OpenAICompatBackend",
    "run_batch",
    "run_task",
]
