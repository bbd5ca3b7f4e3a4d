"""Render command output for the CLI. Every function returns text; printing is the caller's job."""
import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Sequence

from codex_skills.skills.loader import Skill
from codex_skills.skills.matcher import RankedSkill, SkillSignals

SEPARATOR = "-" * 40
NO_MATCH_SHORTLIST = 5


class ListFormat(str, Enum):
    CLIPPED = "clipped"
    BRIEF = "brief"
    VERBOSE = "verbose"
    JSON = "json"


def clip_summary(text: str, limit: int) -> str:
    """Clip text to limit characters, adding '...' when something was cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def render_list(skills: Sequence[Skill], fmt: ListFormat, clip: int) -> str:
    if fmt is ListFormat.JSON:
        return json.dumps([s.name for s in skills], ensure_ascii=False)
    lines = []
    for skill in skills:
        if fmt is ListFormat.BRIEF:
            lines.append(f"- {skill.name}")
        elif fmt is ListFormat.VERBOSE:
            lines.append(f"- {skill.name} — {skill.summary}")
        else:
            lines.append(f"- {skill.name} — {clip_summary(skill.summary, clip)}")
    return "\n".join(lines)


def format_score(score: float) -> str:
    return f"{score:.2f}".rstrip("0").rstrip(".")


def render_reasoning(signals: SkillSignals) -> str:
    return (
        "Top match reasoning: "
        f"name hits={signals.name_hits}, "
        f"summary hits={signals.summary_hits}, "
        f"tag hits={signals.tag_hits}, "
        f"body hits={signals.body_hits}, "
        f"phrase bonus={signals.phrase_bonus}, "
        f"name similarity={signals.name_similarity:.2f}"
        f"{'' if signals.name_similarity_counted else ' (not counted)'}, "
        f"summary similarity={signals.summary_similarity:.2f}"
        f"{'' if signals.summary_similarity_counted else ' (not counted)'}"
    )


def render_body(skill: Skill) -> str:
    return f"{SEPARATOR}\n{skill.body.strip()}\n"


def render_extra_docs(skill: Skill) -> list[str]:
    return [f"\n{SEPARATOR} {extra.name}\n{extra.contents.strip()}\n" for extra in skill.extra_docs]


def render_skill_documents(skill: Skill) -> str:
    """Playbook body followed by every extra doc of the skill."""
    return "\n".join([render_body(skill), *render_extra_docs(skill)])


def render_no_match(query: str, shortlist: Sequence[str]) -> str:
    names = ", ".join(shortlist) if shortlist else "(no close names found)"
    return (
        f"No good skill match for '{query}'. Try a broader or simpler description.\n"
        f"Closest skill names: {names}"
    )


def render_pick(ranked: Sequence[RankedSkill], show: bool) -> str:
    lines: list[str] = []
    for idx, item in enumerate(ranked):
        skill = item.skill
        lines.append(f"{idx + 1}. {skill.name} (score: {format_score(item.score)}) — {skill.summary}")
        if show and idx == 0:
            lines.append("")
            lines.append(render_body(skill))
            lines.append(render_reasoning(item.signals))
            lines.extend(render_extra_docs(skill))
    if show and not ranked:
        lines.append("No matches to display; try a broader query.")
    return "\n".join(lines)


def render_instructions(skills: Sequence[Skill], skills_dir: Path) -> str:
    lines = [
        "STRICT INSTRUCTIONS FOR AGENTS",
        SEPARATOR,
        f"Only use skill playbooks found in: {skills_dir}",
        "1) The only allowed skills are listed below; do NOT invent new skills.",
        "2) Always pick the best-matching skill before acting; if none fit, say so.",
        "3) When using a skill, follow its playbook text verbatim; do not alter or remove steps.",
        "4) Cite the skill name when responding (e.g., 'Using skill: <name>').",
        "5) Do not read or write files outside the skills directory.",
        SEPARATOR,
        "ALLOWED SKILLS:",
    ]
    lines.extend(f"- {s.name} — {s.summary}" for s in skills)
    return "\n".join(lines)


@dataclass
class SkillReport:
    name: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class ValidationReport:
    checked: int
    skills: list[SkillReport]

    @property
    def error_count(self) -> int:
        return sum(len(r.errors) for r in self.skills)

    @property
    def warning_count(self) -> int:
        return sum(len(r.warnings) for r in self.skills)

    def failed(self, strict: bool) -> bool:
        return self.error_count > 0 or (strict and self.warning_count > 0)


def validate_skill(skill: Skill) -> SkillReport:
    report = SkillReport(name=skill.name or skill.source)
    if not skill.name:
        report.errors.append("Missing name")
    elif " " in skill.name:
        report.warnings.append("Name contains spaces (consider using kebab-case)")

    if not skill.summary:
        report.errors.append("Missing description")
    elif len(skill.summary) > 200:
        report.warnings.append(f"Description is {len(skill.summary)} chars (recommended: <200)")

    if not skill.tags:
        report.warnings.append("No tags defined (recommended: 3+)")
    elif len(skill.tags) < 3:
        report.warnings.append(f"Only {len(skill.tags)} tag(s) (recommended: 3+)")

    if not skill.body:
        report.errors.append("Empty skill body")
    elif len(skill.body) < 100:
        report.warnings.append("Very short skill body (<100 chars)")
    return report


def validate_skills(skills: Sequence[Skill]) -> ValidationReport:
    reports = [validate_skill(s) for s in skills]
    return ValidationReport(checked=len(skills), skills=[r for r in reports if r.errors or r.warnings])


def render_validation(report: ValidationReport) -> str:
    lines: list[str] = []
    for item in report.skills:
        lines.append(f"\n{item.name}")
        lines.extend(f"  ✗ ERROR: {e}" for e in item.errors)
        lines.extend(f"  ⚠ WARNING: {w}" for w in item.warnings)
    lines.append(f"\n{report.checked} skills validated")
    lines.append(f"  {report.error_count} errors, {report.warning_count} warnings")
    return "\n".join(lines)


def render_stats(skills: Sequence[Skill]) -> str:
    lines = ["Skill Statistics", SEPARATOR, f"Total skills: {len(skills)}"]
    if skills:
        largest = max(skills, key=lambda s: len(s.body))
        smallest = min(skills, key=lambda s: len(s.body))
        lines.append(
            f"Largest skill: {largest.name} ({len(largest.body)} chars, "
            f"{len(largest.extra_docs)} extra docs)"
        )
        lines.append(f"Smallest skill: {smallest.name} ({len(smallest.body)} chars)")
    lines.append(f"Total extra docs: {sum(len(s.extra_docs) for s in skills)}")
    avg = sum(len(s.body) for s in skills) // max(len(skills), 1)
    lines.append(f"Average skill size: {avg} chars")
    with_tags = sum(1 for s in skills if s.tags)
    lines.append(f"Skills with tags: {with_tags}/{len(skills)}")
    tags = sorted({t for s in skills for t in s.tags})
    lines.append(f"Unique tags: {len(tags)}")
    if tags:
        lines.append(f"\nTags: {', '.join(tags)}")
    return "\n".join(lines)


@dataclass
class SearchHit:
    source: str | None  # None for the playbook body, else the extra doc name
    line_no: int  # 0-based
    lines: list[str]


def _search_text(text: str, needle: str, source: str | None) -> list[SearchHit]:
    lines = text.splitlines()
    return [SearchHit(source, i, lines) for i, line in enumerate(lines) if needle in line.lower()]


def search_skill(skill: Skill, query: str) -> list[SearchHit]:
    needle = query.lower()
    hits = _search_text(skill.body, needle, None)
    for extra in skill.extra_docs:
        hits.extend(_search_text(extra.contents, needle, extra.name))
    return hits


def render_search(skills: Sequence[Skill], query: str, context: int) -> str:
    if not query:
        return "Search text must not be empty."
    out: list[str] = []
    total = 0
    matched_skills = 0
    for skill in skills:
        hits = search_skill(skill, query)
        if not hits:
            continue
        matched_skills += 1
        total += len(hits)
        out.append(f"\n{skill.name} ({len(hits)} matches)")
        out.append(SEPARATOR)
        for hit in hits:
            prefix = f"[{hit.source}] " if hit.source else ""
            out.append(f"  {prefix}L{hit.line_no + 1}: {hit.lines[hit.line_no].strip()}")
            start = max(hit.line_no - context, 0)
            end = min(hit.line_no + context + 1, len(hit.lines))
            for i in range(start, end):
                if i != hit.line_no:
                    out.append(f"    L{i + 1}: {hit.lines[i].strip()}")
    if total == 0:
        return f"No matches found for '{query}'"
    out.append(f"\n{total} total matches across {matched_skills} skills")
    return "\n".join(out)
