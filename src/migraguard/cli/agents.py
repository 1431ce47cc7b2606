"""The `agents` command group: run a batch of sub-agent tasks."""

from __future__ import annotations

import asyncio
from typing import IO

import click
from pydantic import ValidationError

from migraguard.agents import AgentResult, BatchRequest, LLMBackend, OpenAICompatBackend, run_batch
from migraguard.agents.models import batch_response
from migraguard.cli._output import emit_json, fail
from migraguard.cli._shared import load_agent_config
from migraguard.config import AgentConfig

_REQUEST_SHAPE = '{"agents": [{"type": "research", "prompt": "...", "timeout": 60000}]}'


def build_backend(config: AgentConfig) -> LLMBackend:
    return OpenAICompatBackend(config.base_url, config.model, config.api_key)


async def _run(batch: BatchRequest, config: AgentConfig) -> list[AgentResult]:
    backend = build_backend(config)
    try:
        return await run_batch(
            batch.agents, backend, default_timeout_ms=config.default_timeout_ms
        )
    finally:
        await backend.close()


@click.group("agents")
def agents_group() -> None:
    """Delegate work to LLM sub-agents."""


@agents_group.command("run")
@click.argument("request", type=click.File("r"), default="-")
def run_cmd(request: IO[str]) -> None:
    """Run the tasks in REQUEST (a JSON file, or - for stdin) concurrently.

    Prints one result per task in request order. Exits 0 only if every
    task succeeded.
    """
    config = load_agent_config()
    try:
        batch = BatchRequest.model_validate_json(request.read())
    except ValidationError as e:
        fail(
            f"Invalid agent request: {e.error_count()} error(s)",
            f"Expected {_REQUEST_SHAPE}",
            details=e.errors(include_url=False),
        )

    payload = batch_response(asyncio.run(_run(batch, config)))
    emit_json(payload)
    raise SystemExit(0 if payload["success"] else 1)
