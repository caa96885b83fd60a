"""Writes a new project from one of the built-in templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ..errors import ScaffoldError
from .templates import TEMPLATES


@dataclass
class ScaffoldResult:
    kind: str
    directory: Path
    files: List[Path] = field(default_factory=list)


class ProjectScaffolder:
    """Creates ``serverless.yml`` and ``index.php`` in a project directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def create(self, kind: str) -> ScaffoldResult:
        if kind not in TEMPLATES:
            raise ValueError(
                f"Unknown template '{kind}'. Choose one of: {', '.join(TEMPLATES)}"
            )
        files = TEMPLATES[kind]

        # 先检查全部文件，避免只写了一半
        for name in files:
            target = self.directory / name
            if target.exists():
                raise ScaffoldError(str(target))

        self.directory.mkdir(parents=True, exist_ok=True)
        result = ScaffoldResult(kind=kind, directory=self.directory)
        for name, content in files.items():
            target = self.directory / name
            target.write_text(content, encoding="utf-8")
            result.files.append(target)
        return result
