"""Skills: load from YAML-frontmatter Markdown files and rank them against task descriptions."""
from pathlib import Path

from codex_skills.skills.errors import CorpusError, ParseError, SkillError, SkillNotFoundError
from codex_skills.skills.loader import (
    ExtraDoc,
    Skill,
    find_skill,
    find_skill_or_raise,
    load_skills,
    load_skills_with_fallback,
)
from codex_skills.skills.matcher import (
    Query,
    RankedSkill,
    SkillSignals,
    compute_signals,
    match_skill,
    rank_skills,
)


def resolve_skill(message: str, skills_dir: Path) -> Skill | None:
    """Return the best-matching skill for the message from skills_dir (or the bundled set), or None."""
    skills = load_skills_with_fallback(skills_dir)
    return match_skill(message, skills)


__all__ = [
    "CorpusError",
    "ExtraDoc",
    "ParseError",
    "Query",
    "RankedSkill",
    "Skill",
    "SkillError",
    "SkillNotFoundError",
    "SkillSignals",
    "compute_signals",
    "find_skill",
    "find_skill_or_raise",
    "load_skills",
    "load_skills_with_fallback",
    "match_skill",
    "rank_skills",
    "resolve_skill",
]
