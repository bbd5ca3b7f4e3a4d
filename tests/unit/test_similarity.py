import pytest

from codex_skills.skills.similarity import similarity


def test_identical_strings_score_one() -> None:
    assert similarity("frontend-design", "frontend-design") == 1.0


def test_no_shared_characters_score_zero() -> None:
    assert similarity("abc", "xyz") == 0.0


def test_empty_input() -> None:
    assert similarity("", "") == 0.0
    assert similarity("", "design") == 0.0
    assert similarity("design", "") == 0.0


def test_classic_transposition_example() -> None:
    assert similarity("martha", "marhta") == pytest.approx(0.9611, abs=1e-4)


def test_common_prefix_is_rewarded() -> None:
    # Same characters, one pair keeps the prefix and the other does not.
    assert similarity("design", "desing") > similarity("design", "edsign")


def test_symmetric_for_short_strings() -> None:
    assert similarity("brainstorming", "brainstorm") == pytest.approx(similarity("brainstorm", "brainstorming"))


def test_bounded() -> None:
    for a, b in [("ios ux", "ios-ux-design"), ("tdd", "test-driven-development"), ("a", "b")]:
        assert 0.0 <= similarity(a, b) <= 1.0
