"""Persistent developer memory across sessions.

Facts about the developer (stack preferences, project details, habits) are
kept in a JSON file and injected into every system prompt as a short bullet
list. New facts can be added by hand or extracted from a finished chat turn
by the model.
"""

from __future__ import annotations

import dataclasses
import datetime as _dt
import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List

logger = logging.getLogger(__name__)

DuplicatePredicate = Callable[[str, str], bool]

MIN_FACT_CHARS = 5

EXTRACT_PROMPT = """You are analyzing a coding assistant conversation to extract useful memories about the user's preferences, project details, and coding patterns.

User said: "{user}"
Assistant responded with: "{assistant}"

Extract 0-3 SHORT, specific, factual memories worth remembering for future conversations.
Focus on:
- Tech stack preferences (e.g., "prefers TypeScript over JavaScript")
- Project-specific facts (e.g., "uses Express.js backend on port 3001")
- Coding style preferences (e.g., "prefers functional components over class components")
- Patterns they keep asking about (e.g., "frequently needs help with async/await patterns")
- Things to avoid (e.g., "doesn't want to use Redux")

Return ONLY a JSON array of strings. Empty array if nothing worth remembering.
Example: ["prefers TypeScript", "main project uses PostgreSQL", "always uses Tailwind CSS"]

Return [] if the conversation doesn't reveal anything memorable."""


def prefix_duplicate(existing: str, new: str) -> bool:
    """Either fact contains the first 20 characters of the other (case-insensitive)."""
    a, b = existing.lower(), new.lower()
    return b[:20] in a or a[:20] in b


def normalized_duplicate(existing: str, new: str) -> bool:
    """Same words once case, punctuation and spacing are ignored."""
    def norm(s: str) -> str:
        return " ".join(re.findall(r"[a-z0-9]+", s.lower()))
    return norm(existing) == norm(new)


@dataclasses.dataclass
class MemoryFact:
    fact: str
    added_at: str
    use_count: int = 0


class MemoryStore:
    """JSON-file fact store with de-duplication and a size cap."""

    def __init__(
        self,
        path: Path | str,
        max_facts: int = 100,
        is_duplicate: DuplicatePredicate = prefix_duplicate,
    ):
        self.path = Path(path)
        self.max_facts = max_facts
        self.is_duplicate = is_duplicate
        self.facts: List[MemoryFact] = []
        # chat turns extract facts on worker threads while routes edit the list
        self._lock = threading.RLock()

    def load(self) -> None:
        try:
            if self.path.exists():
                data = json.loads(self.path.read_text(encoding="utf-8"))
                self.facts = [
                    MemoryFact(
                        fact=str(d["fact"]),
                        added_at=str(d.get("added_at", "")),
                        use_count=int(d.get("use_count", 0)),
                    )
                    for d in data
                ]
                logger.info(f"Loaded {len(self.facts)} memories")
        except Exception as e:
            logger.warning(f"Ignoring unreadable memory file {self.path}: {e}")
            self.facts = []

    def save(self) -> None:
        """Write to a temp file beside the target, then rename it into place."""
        with self._lock:
            payload = json.dumps([dataclasses.asdict(f) for f in self.facts], indent=2, ensure_ascii=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise

    def add_facts(self, new_facts: Iterable[str]) -> int:
        """Add facts, skipping short ones and duplicates. Returns how many were added."""
        now = _dt.datetime.now(_dt.timezone.utc).isoformat()
        added = 0
        with self._lock:
            for fact in new_facts:
                if not isinstance(fact, str) or len(fact) < MIN_FACT_CHARS:
                    continue
                if any(self.is_duplicate(m.fact, fact) for m in self.facts):
                    continue
                self.facts.append(MemoryFact(fact=fact, added_at=now))
                added += 1

            if len(self.facts) > self.max_facts:
                # keep the most used, newest first among equals
                self.facts.sort(key=lambda m: (m.use_count, m.added_at), reverse=True)
                self.facts = self.facts[:self.max_facts]

            self.save()
        return added

    def add_manual(self, fact: str) -> Dict:
        with self._lock:
            self.add_facts([fact])
            return {"ok": True, "total": len(self.facts)}

    def delete(self, index: int) -> None:
        with self._lock:
            if not 0 <= index < len(self.facts):
                raise IndexError(f"No memory at index {index}")
            del self.facts[index]
            self.save()

    def clear(self) -> None:
        with self._lock:
            self.facts = []
            self.save()

    def all(self) -> List[MemoryFact]:
        with self._lock:
            return list(self.facts)

    def get_context_block(self) -> str:
        """Facts formatted for the system prompt; marks every fact as used."""
        with self._lock:
            if not self.facts:
                return ""
            for m in self.facts:
                m.use_count += 1
            try:
                self.save()
            except OSError as e:
                logger.warning(f"Could not persist memory use counts: {e}")
            facts = "\n".join(f"- {m.fact}" for m in self.facts)
        return f"## What you know about this developer:\n{facts}"

    def extract_facts(self, user_message: str, assistant_response: str, client) -> List[str]:
        """Ask the model for memorable facts in a finished turn and store them.

        Extraction is best-effort: any failure leaves the store unchanged.
        """
        prompt = EXTRACT_PROMPT.format(user=user_message[:500], assistant=assistant_response[:800])
        response = client.chat(system_prompt="", user_message=prompt)
        if response.error or not response.content:
            return []

        match = re.search(r"\[[\s\S]*\]", response.content)
        try:
            extracted = json.loads(match.group(0)) if match else []
        except json.JSONDecodeError:
            logger.debug(f"Memory extraction returned non-JSON: {response.content[:200]}")
            return []
        if not isinstance(extracted, list):
            return []

        facts = [f for f in extracted if isinstance(f, str)]
        if facts:
            self.add_facts(facts)
        return facts
