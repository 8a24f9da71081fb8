"""Web research for coding questions.

Detects questions that benefit from current web information, queries the
DuckDuckGo Instant Answer API and the npm / PyPI registries, and formats the
findings as prompt context. Every network failure degrades to fewer findings.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

RESEARCH_TRIGGERS = [
    "how to", "how do i", "what is", "install", "npm install", "pip install",
    "error:", "exception:", "cannot find", "doesn't work", "not working",
    "latest version", "best way", "best practice", "tutorial", "example",
    "documentation", "docs", "api", "library", "package", "framework",
    "vs ", " vs ", "compare", "difference between", "alternatives to",
    "deprecated", "vulnerability", "cve-", "breaking change",
]

DDG_URL = "https://api.duckduckgo.com/"
NPM_URL = "https://registry.npmjs.org/{name}/latest"
PYPI_URL = "https://pypi.org/pypi/{name}/json"

MAX_WEB_RESULTS = 6
MAX_PACKAGES = 2

_NPM_PATTERN = re.compile(r"(?:npm install|install|import|require)\s+([a-z@][a-z0-9\-@/.]*)", re.IGNORECASE)
_PIP_PATTERN = re.compile(r"(?:pip install|import)\s+([a-z][a-z0-9\-_]*)", re.IGNORECASE)

ProgressCallback = Callable[[Dict], None]


@dataclass
class WebResult:
    title: str
    snippet: str
    url: str = ""


@dataclass
class PackageInfo:
    name: str
    version: str
    description: str
    homepage: str
    type: str
    keywords: str = ""


@dataclass
class ResearchFindings:
    web_results: List[WebResult] = field(default_factory=list)
    package_info: List[PackageInfo] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.web_results and not self.package_info


def should_research(query: str) -> bool:
    lower = query.lower()
    return any(t in lower for t in RESEARCH_TRIGGERS)


def generate_search_queries(user_query: str) -> List[str]:
    queries = [user_query]
    if re.search(r"error:|exception", user_query, re.IGNORECASE):
        queries.append(f"fix: {user_query[:100]}")
        queries.append(f"stackoverflow: {user_query[:80]}")
    if re.search(r"how to|how do", user_query, re.IGNORECASE):
        queries.append(f"{user_query} tutorial")
        queries.append(f"{user_query} example code")
    return queries[:2]


def extract_package_names(query: str) -> List[Dict[str, str]]:
    packages = [{"name": m.group(1), "type": "npm"} for m in _NPM_PATTERN.finditer(query)]
    packages += [{"name": m.group(1), "type": "pypi"} for m in _PIP_PATTERN.finditer(query)]
    return packages


class WebResearcher:

    def __init__(self, timeout: int = 8, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "MyIDE/1.0"})

    def _get_json(self, url: str, params: Optional[Dict] = None) -> Optional[Dict]:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug(f"Research fetch failed for {url}: {e}")
            return None

    def ddg_search(self, query: str) -> List[WebResult]:
        data = self._get_json(
            DDG_URL,
            params={"q": query, "format": "json", "no_html": 1, "skip_disambig": 1},
        )
        if not data:
            return []

        results = []
        if data.get("AbstractText"):
            results.append(WebResult(
                title=data.get("Heading") or query,
                snippet=data["AbstractText"],
                url=data.get("AbstractURL") or "",
            ))
        for topic in (data.get("RelatedTopics") or [])[:4]:
            if topic.get("Text") and topic.get("FirstURL"):
                results.append(WebResult(
                    title=topic["Text"].split(" - ")[0],
                    snippet=topic["Text"],
                    url=topic["FirstURL"],
                ))
        return results

    def npm_lookup(self, name: str) -> Optional[PackageInfo]:
        pkg = self._get_json(NPM_URL.format(name=quote(name, safe="@/")))
        if not pkg or "version" not in pkg:
            return None
        return PackageInfo(
            name=pkg.get("name", name),
            version=pkg["version"],
            description=pkg.get("description") or "",
            homepage=pkg.get("homepage") or f"https://npmjs.com/package/{name}",
            type="npm",
            keywords=", ".join((pkg.get("keywords") or [])[:8]),
        )

    def pypi_lookup(self, name: str) -> Optional[PackageInfo]:
        data = self._get_json(PYPI_URL.format(name=quote(name)))
        info = (data or {}).get("info")
        if not info:
            return None
        return PackageInfo(
            name=info.get("name", name),
            version=info.get("version", ""),
            description=info.get("summary") or "",
            homepage=info.get("home_page") or f"https://pypi.org/project/{name}",
            type="pypi",
        )

    def research(self, query: str, on_progress: Optional[ProgressCallback] = None) -> ResearchFindings:
        findings = ResearchFindings()

        def report(message: str) -> None:
            if on_progress is not None:
                try:
                    on_progress({"status": "searching", "message": message})
                except Exception as e:
                    logger.warning(f"Research progress observer raised, ignoring: {e}")

        report("Searching the web...")
        seen = set()
        for q in generate_search_queries(query):
            for r in self.ddg_search(q):
                if r.url in seen:
                    continue
                seen.add(r.url)
                findings.web_results.append(r)
        findings.web_results = findings.web_results[:MAX_WEB_RESULTS]

        for pkg in extract_package_names(query)[:MAX_PACKAGES]:
            report(f"Looking up {pkg['name']}...")
            lookup = self.npm_lookup if pkg["type"] == "npm" else self.pypi_lookup
            info = lookup(pkg["name"])
            if info:
                findings.package_info.append(info)

        return findings


def format_research_context(findings: ResearchFindings) -> str:
    parts: List[str] = []

    if findings.package_info:
        parts.append("## Package Info")
        for pkg in findings.package_info:
            parts.append(f"**{pkg.name}** v{pkg.version} ({pkg.type})\n{pkg.description}\nDocs: {pkg.homepage}")

    if findings.web_results:
        parts.append("## Web Research")
        for r in findings.web_results[:4]:
            if r.snippet:
                source = f"\n_Source: {r.url}_" if r.url else ""
                parts.append(f"**{r.title}**\n{r.snippet}{source}")

    return "\n\n".join(parts)
