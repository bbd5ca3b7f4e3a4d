"""Text normalization shared by skill fields and queries."""
import re

# Unicode letters and digits; underscore and everything else split tokens.
_TOKEN_RE = re.compile(r"[^\W_]+")


def tokenize(text: str | None) -> frozenset[str]:
    """Lowercased alphanumeric tokens of text, duplicates collapsed. No stemming or stopwords."""
    return frozenset(_TOKEN_RE.findall((text or "").lower()))


def normalize(text: str | None) -> str:
    """Whole-string form used for phrase containment and similarity."""
    return (text or "").strip().lower()
