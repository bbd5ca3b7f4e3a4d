from codex_skills.skills.text import normalize, tokenize


def test_tokenize_splits_on_non_alphanumerics_and_lowercases() -> None:
    assert tokenize("Bug-Triage Workflow: v2_final!") == {"bug", "triage", "workflow", "v2", "final"}


def test_tokenize_collapses_duplicates_and_keeps_stopwords() -> None:
    assert tokenize("the The THE and a") == {"the", "and", "a"}


def test_tokenize_handles_unicode_letters() -> None:
    assert tokenize("Café Überblick") == {"café", "überblick"}


def test_tokenize_empty_and_whitespace() -> None:
    assert tokenize("") == frozenset()
    assert tokenize("   \t\n") == frozenset()
    assert tokenize(None) == frozenset()


def test_normalize_trims_and_lowercases() -> None:
    assert normalize("  Frontend Design \n") == "frontend design"
    assert normalize("   ") == ""
    assert normalize(None) == ""
