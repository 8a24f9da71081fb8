"""Chat and multi-agent generation."""

from .pipeline import (
    CHAT_STAGES,
    TEAM_STAGES,
    GenerationPipeline,
    PipelineEvent,
    PipelineRun,
    Stage,
)

__all__ = [
    "CHAT_STAGES",
    "TEAM_STAGES",
    "GenerationPipeline",
    "PipelineEvent",
    "PipelineRun",
    "Stage",
]
