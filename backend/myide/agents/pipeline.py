"""Staged generation pipeline.

Single-turn chat is a one-stage run; the agent team is planner -> coder ->
reviewer. Stages run strictly one after another: each stage is built from the
complete output of the stages before it and streams its own output as
``PipelineEvent`` objects. The first failure ends the run with an ``error``
event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Dict, List, Literal, Optional, Protocol, Tuple

from pydantic import BaseModel

from .prompts import CHAT_SYSTEM_PROMPT, CODER_PROMPT, PLANNER_PROMPT, REVIEWER_PROMPT

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class Provider(Protocol):
    def generate(self, system_prompt: str, messages: List[Message]) -> AsyncIterator[str]:
        ...


class PipelineEvent(BaseModel):
    type: Literal["stage-start", "stage-chunk", "stage-done", "all-done", "error"]
    stage: Optional[str] = None
    label: Optional[str] = None
    text: Optional[str] = None
    message: Optional[str] = None
    outputs: Optional[Dict[str, str]] = None


@dataclass
class PipelineRun:
    """State of one request; lives only as long as the request."""

    user_request: str
    context_block: str = ""
    messages: List[Message] = field(default_factory=list)
    outputs: Dict[str, str] = field(default_factory=dict)


# (system prompt, messages) for a stage given the run so far
StageInput = Tuple[str, List[Message]]


@dataclass(frozen=True)
class Stage:
    name: str
    label: str
    build: Callable[[PipelineRun], StageInput]


def _chat_input(run: PipelineRun) -> StageInput:
    system = CHAT_SYSTEM_PROMPT
    if run.context_block:
        system = f"{system}\n\n{run.context_block}"
    messages = list(run.messages) or [{"role": "user", "content": run.user_request}]
    return system, messages


def _planner_input(run: PipelineRun) -> StageInput:
    content = run.user_request
    if run.context_block:
        content = f"{run.user_request}\n\n---\n\n{run.context_block}"
    return PLANNER_PROMPT, [{"role": "user", "content": content}]


def _coder_input(run: PipelineRun) -> StageInput:
    context = f"## Context:\n{run.context_block}\n\n" if run.context_block else ""
    content = (
        f"## User Request:\n{run.user_request}\n\n"
        f"## Plan from Planner:\n{run.outputs['planner']}\n\n"
        f"{context}"
        "Now implement this. Write the complete code."
    )
    return CODER_PROMPT, [{"role": "user", "content": content}]


def _reviewer_input(run: PipelineRun) -> StageInput:
    content = (
        f"## Original request:\n{run.user_request}\n\n"
        f"## Code written by Coder:\n{run.outputs['coder']}\n\n"
        "Review this code thoroughly."
    )
    return REVIEWER_PROMPT, [{"role": "user", "content": content}]


CHAT_STAGES = (Stage("assistant", "Assistant", _chat_input),)

TEAM_STAGES = (
    Stage("planner", "Planner", _planner_input),
    Stage("coder", "Coder", _coder_input),
    Stage("reviewer", "Reviewer", _reviewer_input),
)


class GenerationPipeline:

    def __init__(self, provider: Provider):
        self.provider = provider

    async def _stream_stage(self, stage: Stage, run: PipelineRun, sink: List[str]) -> AsyncIterator[PipelineEvent]:
        system, messages = stage.build(run)
        yield PipelineEvent(type="stage-start", stage=stage.name, label=stage.label)
        async for text in self.provider.generate(system, messages):
            sink.append(text)
            yield PipelineEvent(type="stage-chunk", stage=stage.name, text=text)
        yield PipelineEvent(type="stage-done", stage=stage.name)

    async def run(self, stages: Tuple[Stage, ...], run: PipelineRun) -> AsyncIterator[PipelineEvent]:
        for stage in stages:
            sink: List[str] = []
            try:
                async for event in self._stream_stage(stage, run, sink):
                    yield event
            except Exception as e:
                logger.error(f"Stage {stage.name} failed: {e}")
                yield PipelineEvent(type="error", stage=stage.name, message=str(e) or type(e).__name__)
                return
            run.outputs[stage.name] = "".join(sink)

        yield PipelineEvent(type="all-done", outputs=dict(run.outputs))

    def chat(self, messages: List[Message], context_block: str = "") -> AsyncIterator[PipelineEvent]:
        """Single-turn chat over the conversation history."""
        last_user = next((m["content"] for m in reversed(messages) if m.get("role") == "user"), "")
        run = PipelineRun(user_request=last_user, context_block=context_block, messages=list(messages))
        return self.run(CHAT_STAGES, run)

    def run_team(self, user_request: str, context_block: str = "") -> AsyncIterator[PipelineEvent]:
        """Plan, implement, review."""
        run = PipelineRun(user_request=user_request, context_block=context_block)
        return self.run(TEAM_STAGES, run)
