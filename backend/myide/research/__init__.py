"""Web research collaborator."""

from .web import (
    PackageInfo,
    ResearchFindings,
    WebResearcher,
    WebResult,
    format_research_context,
    should_research,
)

__all__ = [
    "PackageInfo",
    "ResearchFindings",
    "WebResearcher",
    "WebResult",
    "format_research_context",
    "should_research",
]
