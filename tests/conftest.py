"""Pytest fixtures and helpers for codex-skills tests."""
from pathlib import Path
from typing import Callable

import pytest

from codex_skills.logging_utils import configure_logging
from codex_skills.skills.loader import Skill

configure_logging("WARNING")


def make_skill(
    name: str,
    summary: str = "",
    tags: tuple[str, ...] = (),
    body: str = "",
) -> Skill:
    return Skill.build(name=name, summary=summary, tags=tags, body=body, source=f"test:{name}")


def skill_md(name: str, description: str, tags: list[str] | None = None, body: str = "Body text.") -> str:
    lines = ["---", f"name: {name}", f"description: {description}"]
    if tags:
        lines.append("tags:")
        lines.extend(f"  - {t}" for t in tags)
    lines.append("---")
    lines.append("")
    lines.append(body)
    return "\n".join(lines) + "\n"


@pytest.fixture
def write_skill(tmp_path: Path) -> Callable[..., Path]:
    """Write a skill folder under tmp_path/skills and return the SKILL.md path."""

    def _write(folder: str, text: str, filename: str = "SKILL.md") -> Path:
        path = tmp_path / "skills" / folder / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory with no config files or CODEX_SKILLS_* variables."""
    for var in ("CODEX_SKILLS_DIR", "CODEX_SKILLS_TOP", "CODEX_SKILLS_CLIP", "CODEX_SKILLS_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    return tmp_path
