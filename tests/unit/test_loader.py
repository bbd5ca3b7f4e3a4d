from pathlib import Path

import pytest

from codex_skills.skills.errors import CorpusError, ParseError, SkillNotFoundError
from codex_skills.skills.loader import (
    Skill,
    dedupe_skills,
    find_skill,
    find_skill_or_raise,
    load_bundled_skills,
    load_skills,
    load_skills_with_fallback,
    materialize_skills,
    parse_skill,
)
from tests.conftest import make_skill, skill_md


def test_parse_skill_reads_frontmatter_and_body() -> None:
    text = skill_md("frontend-design", "Build UIs", ["Frontend", "css-grid"], body="# Title\n\nSteps.")
    skill = parse_skill(text, "mem")

    assert skill.name == "frontend-design"
    assert skill.summary == "Build UIs"
    assert skill.tags == ("Frontend", "css-grid")
    assert skill.body == "# Title\n\nSteps."
    assert skill.source == "mem"


def test_parse_skill_precomputes_tokens_and_phrases() -> None:
    skill = parse_skill(skill_md("Frontend-Design", "Build UIs", ["CSS grid"], body="Use Flexbox"), "mem")

    assert skill.name_tokens == {"frontend", "design"}
    assert skill.summary_tokens == {"build", "uis"}
    assert skill.tag_tokens == {"css", "grid"}
    assert skill.body_tokens == {"use", "flexbox"}
    assert skill.name_phrase == "frontend-design"
    assert skill.body_phrase == "use flexbox"


def test_parse_skill_without_frontmatter_is_not_a_skill() -> None:
    assert parse_skill("# Just notes\n", "mem") is None
    assert parse_skill("", "mem") is None


def test_parse_skill_unclosed_frontmatter_is_not_a_skill() -> None:
    assert parse_skill("---\nname: x\ndescription: y\n", "mem") is None


def test_parse_skill_invalid_yaml_raises() -> None:
    with pytest.raises(ParseError) as exc:
        parse_skill("---\nname: [unclosed\n---\nbody\n", "broken.md")
    assert exc.value.source == "broken.md"


@pytest.mark.parametrize(
    "frontmatter",
    [
        "description: no name",
        "name: no-description",
        "name: [a, b]\ndescription: list name",
        "just a string",
        "",
        "name: x\ndescription: y\ntags:\n  - {nested: map}",
    ],
)
def test_parse_skill_schema_errors(frontmatter) -> None:
    with pytest.raises(ParseError):
        parse_skill(f"---\n{frontmatter}\n---\nbody\n", "bad.md")


def test_parse_skill_scalar_tag_becomes_list() -> None:
    skill = parse_skill("---\nname: x\ndescription: y\ntags: solo\n---\nbody\n", "mem")
    assert skill.tags == ("solo",)


def test_parse_skill_missing_tags_is_empty() -> None:
    skill = parse_skill("---\nname: x\ndescription: y\n---\nbody\n", "mem")
    assert skill.tags == ()
    assert skill.tag_tokens == frozenset()


def test_skill_is_immutable() -> None:
    skill = make_skill("x")
    with pytest.raises(AttributeError):
        skill.name = "y"


def test_load_skills_collects_extra_docs(write_skill, tmp_path: Path) -> None:
    write_skill("debugging", skill_md("systematic-debugging", "Find root causes"))
    write_skill("debugging", "# Pressure Test 1\n", filename="pressure.md")
    write_skill("debugging", "# Deep note\n", filename="notes/deep.md")
    write_skill("debugging", "not markdown", filename="script.sh")

    skills = load_skills(tmp_path / "skills")

    assert len(skills) == 1
    extras = skills[0].extra_docs
    assert [e.name for e in extras] == ["notes/deep.md", "pressure.md"]
    assert extras[1].contents == "# Pressure Test 1\n"


def test_nested_skill_is_its_own_entry(write_skill, tmp_path: Path) -> None:
    write_skill("outer", skill_md("outer", "Outer skill"))
    write_skill("outer/inner", skill_md("inner", "Inner skill"))

    skills = {s.name: s for s in load_skills(tmp_path / "skills")}

    assert set(skills) == {"outer", "inner"}
    assert skills["outer"].extra_docs == ()


def test_load_skills_matches_file_name_case_insensitively(write_skill, tmp_path: Path) -> None:
    write_skill("lower", skill_md("lower", "Lowercase file"), filename="skill.md")
    write_skill("upper", skill_md("upper", "Uppercase file"))

    names = [s.name for s in load_skills(tmp_path / "skills")]

    assert sorted(names) == ["lower", "upper"]


def test_load_skills_skips_malformed_and_continues(write_skill, tmp_path: Path, caplog) -> None:
    write_skill("a-good", skill_md("good", "Works"))
    write_skill("b-bad", "---\nname: [broken\n---\nbody\n")
    write_skill("c-plain", "no frontmatter at all\n")

    skills = load_skills(tmp_path / "skills")

    assert [s.name for s in skills] == ["good"]
    assert "skill_parse_error" in caplog.text


def test_load_skills_missing_dir_is_empty(tmp_path: Path) -> None:
    assert load_skills(tmp_path / "nope") == []


def test_load_skills_rejects_file_path(tmp_path: Path) -> None:
    path = tmp_path / "skills"
    path.write_text("not a dir")
    with pytest.raises(CorpusError):
        load_skills(path)


def test_dedupe_keeps_first_loaded() -> None:
    skills = [
        make_skill("test-skill", summary="first"),
        make_skill("Test-Skill", summary="second"),
        make_skill("other-skill"),
    ]

    unique = dedupe_skills(skills)

    assert [s.name for s in unique] == ["test-skill", "other-skill"]
    assert unique[0].summary == "first"


def test_duplicate_names_on_disk_keep_sorted_path_order(write_skill, tmp_path: Path) -> None:
    write_skill("b-copy", skill_md("Shared", "From b"))
    write_skill("a-copy", skill_md("shared", "From a"))

    skills = load_skills_with_fallback(tmp_path / "skills")

    assert len(skills) == 1
    assert skills[0].summary == "From a"


def test_fallback_to_bundled_when_dir_missing(tmp_path: Path) -> None:
    skills = load_skills_with_fallback(tmp_path / "missing")
    names = {s.name for s in skills}
    assert {"brainstorming", "frontend-design", "systematic-debugging"} <= names


def test_fallback_to_bundled_when_dir_has_no_skills(tmp_path: Path) -> None:
    (tmp_path / "skills").mkdir()
    assert load_skills_with_fallback(tmp_path / "skills") == dedupe_skills(load_bundled_skills())


def test_bundled_skills_carry_extra_docs() -> None:
    debugging = find_skill(load_bundled_skills(), "systematic-debugging")
    assert debugging is not None
    assert any("Pressure Test 1: Emergency Production Fix" in e.contents for e in debugging.extra_docs)
    assert all(s.source.startswith("bundled:") for s in load_bundled_skills())


def test_materialize_writes_bundled_tree(tmp_path: Path) -> None:
    target = tmp_path / "out"

    written = materialize_skills(target)

    assert (target / "brainstorming" / "SKILL.md").is_file()
    assert (target / "systematic-debugging" / "test-pressure-1.md").is_file()
    assert len(written) == len(list(target.rglob("*.md")))
    on_disk = {s.name for s in load_skills(target)}
    assert on_disk == {s.name for s in load_bundled_skills()}


def test_materialize_keeps_existing_files_unless_forced(tmp_path: Path) -> None:
    target = tmp_path / "out"
    materialize_skills(target)
    custom = target / "brainstorming" / "SKILL.md"
    custom.write_text("custom", encoding="utf-8")

    second = materialize_skills(target)
    assert custom not in second
    assert custom.read_text(encoding="utf-8") == "custom"

    forced = materialize_skills(target, force=True)
    assert custom in forced
    assert custom.read_text(encoding="utf-8") != "custom"


def test_find_skill_prefers_exact_match() -> None:
    skills = [make_skill("design-review"), make_skill("Design")]
    assert find_skill(skills, "design").name == "Design"


def test_find_skill_partial_and_case_insensitive() -> None:
    skills = [make_skill("frontend-design"), make_skill("ios-ux-design")]
    assert find_skill(skills, "IOS-UX").name == "ios-ux-design"
    assert find_skill(skills, "backend") is None
    assert find_skill(skills, "  ") is None


def test_find_skill_or_raise() -> None:
    with pytest.raises(SkillNotFoundError) as exc:
        find_skill_or_raise([make_skill("a")], "missing")
    assert exc.value.name == "missing"
    assert isinstance(exc.value, LookupError)


def test_skill_build_flattens_tag_tokens() -> None:
    skill = Skill.build(name="x", summary="y", tags=["Red Green", "refactor"])
    assert skill.tag_tokens == {"red", "green", "refactor"}
