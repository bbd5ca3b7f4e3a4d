"""Load skill folders: a SKILL.md with YAML frontmatter + Markdown body, plus extra .md docs."""
from dataclasses import dataclass, field
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Iterable, Sequence

import yaml

from codex_skills.logging_utils import get_logger
from codex_skills.skills.errors import CorpusError, ParseError, SkillNotFoundError
from codex_skills.skills.text import normalize, tokenize

logger = get_logger(__name__)

SKILL_FILENAME = "SKILL.md"
BUNDLED_PACKAGE = "codex_skills"
BUNDLED_DIRNAME = "bundled"


@dataclass(frozen=True)
class ExtraDoc:
    """Auxiliary Markdown file shipped in a skill folder. Not used for scoring."""

    name: str
    contents: str


@dataclass(frozen=True)
class Skill:
    """A single skill: frontmatter metadata, playbook body and the token sets used for matching.

    Build instances with Skill.build so the token sets always come from the same
    normalization as the query.
    """

    name: str
    summary: str
    tags: tuple[str, ...]
    body: str
    extra_docs: tuple[ExtraDoc, ...] = ()
    source: str = ""
    name_tokens: frozenset[str] = field(default=frozenset(), repr=False)
    summary_tokens: frozenset[str] = field(default=frozenset(), repr=False)
    tag_tokens: frozenset[str] = field(default=frozenset(), repr=False)
    body_tokens: frozenset[str] = field(default=frozenset(), repr=False)
    name_phrase: str = field(default="", repr=False)
    summary_phrase: str = field(default="", repr=False)
    body_phrase: str = field(default="", repr=False)

    @classmethod
    def build(
        cls,
        name: str,
        summary: str,
        tags: Iterable[str] = (),
        body: str = "",
        extra_docs: Iterable[ExtraDoc] = (),
        source: str = "",
    ) -> "Skill":
        tags = tuple(tags)
        tag_tokens: frozenset[str] = frozenset().union(*(tokenize(t) for t in tags))
        return cls(
            name=name,
            summary=summary,
            tags=tags,
            body=body,
            extra_docs=tuple(extra_docs),
            source=source,
            name_tokens=tokenize(name),
            summary_tokens=tokenize(summary),
            tag_tokens=tag_tokens,
            body_tokens=tokenize(body),
            name_phrase=normalize(name),
            summary_phrase=normalize(summary),
            body_phrase=normalize(body),
        )


def _split_frontmatter(text: str) -> tuple[str, str] | None:
    """Return (yaml_block, body) when text opens with a '---' delimited block, else None."""
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return None
    for idx in range(1, len(lines)):
        if lines[idx].strip() == "---":
            return "\n".join(lines[1:idx]), "\n".join(lines[idx + 1 :]).strip()
    return None


def _as_tags(value: object, source: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        if not all(isinstance(t, (str, int, float)) for t in value):
            raise ParseError(source, "'tags' must be a list of strings")
        return [str(t) for t in value]
    if isinstance(value, (str, int, float)):
        return [str(value)]
    raise ParseError(source, "'tags' must be a list of strings")


def parse_skill(text: str, source: str, extra_docs: Iterable[ExtraDoc] = ()) -> Skill | None:
    """Parse a SKILL.md document. Returns None if there is no frontmatter block.
    Raises ParseError when the frontmatter is not valid YAML or misses name/description.
    """
    split = _split_frontmatter(text)
    if split is None:
        return None
    yaml_block, body = split
    try:
        meta = yaml.safe_load(yaml_block)
    except yaml.YAMLError as e:
        raise ParseError(source, str(e)) from e
    if not isinstance(meta, dict):
        raise ParseError(source, "frontmatter must be a mapping with 'name' and 'description'")
    name = meta.get("name")
    description = meta.get("description")
    if not isinstance(name, str):
        raise ParseError(source, "'name' is required and must be a string")
    if not isinstance(description, str):
        raise ParseError(source, "'description' is required and must be a string")
    return Skill.build(
        name=name.strip(),
        summary=description.strip(),
        tags=_as_tags(meta.get("tags"), source),
        body=body,
        extra_docs=extra_docs,
        source=source,
    )


def _is_skill_file(name: str) -> bool:
    return name.lower() == SKILL_FILENAME.lower()


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusError(f"Failed to read skill file {path}: {e}") from e


def load_extra_docs(folder: Path, skill_path: Path) -> tuple[ExtraDoc, ...]:
    """Every other .md file under folder (recursive), skipping nested SKILL.md files of other skills."""
    docs: list[ExtraDoc] = []
    for path in folder.rglob("*.md"):
        if path == skill_path or _is_skill_file(path.name) or not path.is_file():
            continue
        docs.append(ExtraDoc(name=path.relative_to(folder).as_posix(), contents=_read_text(path)))
    return tuple(sorted(docs, key=lambda d: d.name))


def load_skill_file(path: Path) -> Skill | None:
    """Load one skill from its SKILL.md path, with the extra docs of its folder."""
    text = _read_text(path)
    return parse_skill(text, str(path), load_extra_docs(path.parent, path))


def load_skills(skills_dir: Path) -> list[Skill]:
    """Discover SKILL.md files (any case) under skills_dir, recursively, in sorted path order.
    Malformed files are skipped with a log warning.
    Raises CorpusError when skills_dir exists but is not a directory.
    """
    if not skills_dir.exists():
        return []
    if not skills_dir.is_dir():
        raise CorpusError(f"Skills path {skills_dir} is not a directory")
    skills: list[Skill] = []
    paths = sorted(p for p in skills_dir.rglob("*") if p.is_file() and _is_skill_file(p.name))
    for path in paths:
        try:
            skill = load_skill_file(path)
        except ParseError as e:
            logger.warning("skill_parse_error", path=str(path), error=e.reason)
            continue
        if skill is not None:
            skills.append(skill)
    return skills


def _bundled_root() -> Traversable:
    return resources.files(BUNDLED_PACKAGE) / BUNDLED_DIRNAME


def _walk_bundled(node: Traversable, prefix: str = "") -> Iterable[tuple[str, Traversable]]:
    """Yield (relative posix path, file) for every file under node, sorted by name."""
    for child in sorted(node.iterdir(), key=lambda c: c.name):
        rel = f"{prefix}{child.name}"
        if child.is_dir():
            yield from _walk_bundled(child, rel + "/")
        elif child.is_file():
            yield rel, child


def load_bundled_skills() -> list[Skill]:
    """Skills shipped inside the package, parsed with the same rules as on-disk ones."""
    files = list(_walk_bundled(_bundled_root()))
    skills: list[Skill] = []
    for rel, node in files:
        if not _is_skill_file(node.name):
            continue
        folder = rel.rpartition("/")[0]
        extras = [
            ExtraDoc(name=other_rel[len(folder) + 1 :], contents=other.read_text(encoding="utf-8"))
            for other_rel, other in files
            if other_rel.startswith(folder + "/")
            and other_rel.lower().endswith(".md")
            and not _is_skill_file(other.name)
        ]
        source = f"bundled:{rel}"
        try:
            skill = parse_skill(
                node.read_text(encoding="utf-8"),
                source,
                sorted(extras, key=lambda d: d.name),
            )
        except ParseError as e:
            logger.warning("skill_parse_error", path=source, error=e.reason)
            continue
        if skill is not None:
            skills.append(skill)
    return skills


def dedupe_skills(skills: Iterable[Skill]) -> list[Skill]:
    """Keep the first skill for each case-insensitive name."""
    seen: set[str] = set()
    unique: list[Skill] = []
    for skill in skills:
        key = skill.name.lower()
        if key in seen:
            logger.info("skill_duplicate_skipped", name=skill.name, source=skill.source)
            continue
        seen.add(key)
        unique.append(skill)
    return unique


def load_skills_with_fallback(skills_dir: Path) -> list[Skill]:
    """Skills from skills_dir, or the bundled skills when the directory is missing or has none."""
    skills = load_skills(skills_dir)
    origin = str(skills_dir)
    if not skills:
        skills = load_bundled_skills()
        origin = "bundled"
    skills = dedupe_skills(skills)
    logger.info("skills_loaded", count=len(skills), origin=origin)
    return skills


def materialize_skills(skills_dir: Path, force: bool = False) -> list[Path]:
    """Write the bundled skills tree into skills_dir. Existing files are kept unless force."""
    written: list[Path] = []
    for rel, node in _walk_bundled(_bundled_root()):
        if not rel.lower().endswith(".md"):
            continue
        target = skills_dir / rel
        if target.exists() and not force:
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(node.read_bytes())
        written.append(target)
    logger.info("skills_materialized", path=str(skills_dir), files=len(written), force=force)
    return written


def find_skill(skills: Sequence[Skill], name: str) -> Skill | None:
    """Case-insensitive lookup: an exact name match first, else the first name containing name."""
    needle = name.strip().lower()
    if not needle:
        return None
    for skill in skills:
        if skill.name.lower() == needle:
            return skill
    for skill in skills:
        if needle in skill.name.lower():
            return skill
    return None


def find_skill_or_raise(skills: Sequence[Skill], name: str) -> Skill:
    skill = find_skill(skills, name)
    if skill is None:
        raise SkillNotFoundError(name)
    return skill
