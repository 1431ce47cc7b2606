"""Fan sub-agent tasks out to an LLM backend and collect one result per task.

Each task gets its own timeout. A task that times out, errors, or answers
with something other than a valid response for its type becomes a failed
AgentResult; it never takes its siblings down with it.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from migraguard.agents.backend import LLMBackend, LLMError
from migraguard.agents.models import RESPONSE_SCHEMAS, AgentResult, AgentTask
from migraguard.agents.prompts import system_prompt_for
from migraguard.config import DEFAULT_AGENT_TIMEOUT_MS

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*\n(.*?)```", re.DOTALL)


def parse_json_response(content: str) -> Any:
    """Parse an LLM reply as JSON, unwrapping a markdown code fence if present.

    Raises json.JSONDecodeError when the reply is not JSON.
    """
    match = _FENCE.search(content)
    raw = match.group(1) if match else content
    return json.loads(raw.strip())


def _elapsed_ms(t0: float) -> int:
    return round((time.monotonic() - t0) * 1000)


async def run_task(
    task: AgentTask,
    backend: LLMBackend,
    *,
    default_timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS,
) -> AgentResult:
    timeout_ms = task.timeout_ms or default_timeout_ms
    t0 = time.monotonic()

    def failed(error: str, *, timed_out: bool = False) -> AgentResult:
        logger.info("agent %s failed: %s", task.type.value, error)
        return AgentResult(
            type=task.type, success=False, error=error,
            timed_out=timed_out, elapsed_ms=_elapsed_ms(t0),
        )

    try:
        reply = await asyncio.wait_for(
            backend.generate(system_prompt_for(task.type), task.prompt),
            timeout=timeout_ms / 1000,
        )
    except TimeoutError:
        return failed(f"Agent timed out after {timeout_ms}ms", timed_out=True)
    except LLMError as e:
        return failed(str(e))

    try:
        data = parse_json_response(reply.content)
    except json.JSONDecodeError as e:
        return failed(f"Agent returned invalid JSON: {e.msg} (line {e.lineno})")

    try:
        response = RESPONSE_SCHEMAS[task.type].model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first["loc"]) or "<root>"
        return failed(
            f"Response does not match the {task.type.value} schema "
            f"({e.error_count()} error(s); first at {where}: {first['msg']})"
        )

    return AgentResult(
        type=task.type,
        success=True,
        response=response.model_dump(mode="json"),
        elapsed_ms=_elapsed_ms(t0),
    )


async def run_batch(
    tasks: Sequence[AgentTask],
    backend: LLMBackend,
    *,
    default_timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS,
) -> list[AgentResult]:
    """Run every task concurrently. Results come back in input order."""
    t0 = time.monotonic()
    outcomes = await asyncio.gather(
        *(run_task(t, backend, default_timeout_ms=default_timeout_ms) for t in tasks),
        return_exceptions=True,
    )

    results: list[AgentResult] = []
    for task, outcome in zip(tasks, outcomes, strict=True):
        if isinstance(outcome, AgentResult):
            results.append(outcome)
        elif isinstance(outcome, Exception):
            logger.warning("agent %s raised", task.type.value, exc_info=outcome)
            results.append(AgentResult(
                type=task.type, success=False,
                error=f"{type(outcome).__name__}: {outcome}",
                elapsed_ms=_elapsed_ms(t0),
            ))
        else:
            raise outcome
    return results
