"""Rule-driven extraction of named facts from free-form command output."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Sequence, Union

from ..errors import ExtractionError
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExtractionRule:
    """Pairs a fact name with the pattern that finds it."""

    name: str
    pattern: re.Pattern[str]
    group: int = 1
    required: bool = True

    @classmethod
    def compile(
        cls,
        name: str,
        pattern: Union[str, re.Pattern[str]],
        *,
        group: int = 1,
        required: bool = True,
    ) -> "ExtractionRule":
        if isinstance(pattern, str):
            pattern = re.compile(pattern, re.MULTILINE)
        return cls(name=name, pattern=pattern, group=group, required=required)

    def apply(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        if match is None:
            return None
        value = match.group(self.group)
        if value is None:
            return None
        value = value.strip()
        return value or None


class FactSet(Mapping[str, str]):
    """Immutable fact-name to value mapping threaded between stages."""

    def __init__(self, facts: Optional[Mapping[str, str]] = None) -> None:
        self._facts: Dict[str, str] = dict(facts or {})

    def __getitem__(self, key: str) -> str:
        return self._facts[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._facts)

    def __len__(self) -> int:
        return len(self._facts)

    def __repr__(self) -> str:
        return f"FactSet({self._facts!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._facts) == dict(other)
        return NotImplemented

    def merged(self, other: Mapping[str, str]) -> "FactSet":
        """Return a new FactSet with ``other`` added. Existing facts win."""
        combined = dict(self._facts)
        for name, value in other.items():
            if name in combined:
                if combined[name] != value:
                    logger.debug(
                        "Ignoring new value %r for fact %s (already %r)",
                        value, name, combined[name],
                    )
                continue
            combined[name] = value
        return FactSet(combined)


def extract(text: str, rules: Sequence[ExtractionRule]) -> FactSet:
    """Apply ``rules`` to ``text``.

    Every rule sees the whole text. The first required rule (in declaration
    order) without a match raises ``ExtractionError``; optional rules that do
    not match are left out of the result.
    """
    found: Dict[str, str] = {}
    for rule in rules:
        value = rule.apply(text)
        if value is None:
            if rule.required:
                raise ExtractionError(rule.name)
            continue
        found.setdefault(rule.name, value)
    return FactSet(found)

