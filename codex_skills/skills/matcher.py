"""Match a task description to skills with weighted lexical signals and gated fuzzy similarity."""
from dataclasses import dataclass
from typing import Sequence

from codex_skills.skills.loader import Skill
from codex_skills.skills.similarity import similarity
from codex_skills.skills.text import normalize, tokenize

NAME_WEIGHT = 8
SUMMARY_WEIGHT = 5
TAG_WEIGHT = 4
BODY_WEIGHT = 1
PHRASE_WEIGHT = 1
NAME_SIM_WEIGHT = 2
SUMMARY_SIM_WEIGHT = 1

# Raw similarity at or above these counts even without any token overlap.
NAME_SIM_THRESHOLD = 0.92
SUMMARY_SIM_THRESHOLD = 0.94


@dataclass(frozen=True)
class Query:
    """A task description tokenized the same way as skill fields."""

    text: str
    tokens: frozenset[str]
    phrase: str

    @classmethod
    def from_text(cls, text: str) -> "Query":
        return cls(text=text, tokens=tokenize(text), phrase=normalize(text))


@dataclass(frozen=True)
class SkillSignals:
    """Scoring signals for one (query, skill) pair.

    Similarity values are the raw scores; the *_counted flags record whether the
    gate let them into total_score.
    """

    name_hits: int = 0
    summary_hits: int = 0
    tag_hits: int = 0
    body_hits: int = 0
    phrase_bonus: int = 0
    name_similarity: float = 0.0
    summary_similarity: float = 0.0
    name_similarity_counted: bool = False
    summary_similarity_counted: bool = False

    @property
    def token_hits(self) -> int:
        return self.name_hits + self.summary_hits + self.tag_hits + self.body_hits

    @property
    def gated_name_similarity(self) -> float:
        return self.name_similarity if self.name_similarity_counted else 0.0

    @property
    def gated_summary_similarity(self) -> float:
        return self.summary_similarity if self.summary_similarity_counted else 0.0

    @property
    def total_score(self) -> float:
        return (
            NAME_WEIGHT * self.name_hits
            + SUMMARY_WEIGHT * self.summary_hits
            + TAG_WEIGHT * self.tag_hits
            + BODY_WEIGHT * self.body_hits
            + PHRASE_WEIGHT * self.phrase_bonus
            + NAME_SIM_WEIGHT * self.gated_name_similarity
            + SUMMARY_SIM_WEIGHT * self.gated_summary_similarity
        )


@dataclass(frozen=True)
class RankedSkill:
    skill: Skill
    signals: SkillSignals

    @property
    def score(self) -> float:
        return self.signals.total_score


def overlap(query_tokens: frozenset[str], target_tokens: frozenset[str]) -> int:
    """Count how many query tokens appear in the target tokens."""
    return len(query_tokens & target_tokens)


def _phrase_hit(phrase: str, skill: Skill) -> bool:
    if not phrase:
        return False
    return phrase in skill.name_phrase or phrase in skill.summary_phrase or phrase in skill.body_phrase


def compute_signals(skill: Skill, query: Query) -> SkillSignals:
    """Compute the matching signals between a query and a skill. Pure."""
    name_hits = overlap(query.tokens, skill.name_tokens)
    summary_hits = overlap(query.tokens, skill.summary_tokens)
    tag_hits = overlap(query.tokens, skill.tag_tokens)
    body_hits = overlap(query.tokens, skill.body_tokens)
    has_overlap = (name_hits + summary_hits + tag_hits + body_hits) > 0

    name_sim = similarity(query.phrase, skill.name_phrase)
    summary_sim = similarity(query.phrase, skill.summary_phrase)

    # Only trust similarity when there is token agreement or the match is very strong.
    return SkillSignals(
        name_hits=name_hits,
        summary_hits=summary_hits,
        tag_hits=tag_hits,
        body_hits=body_hits,
        phrase_bonus=1 if _phrase_hit(query.phrase, skill) else 0,
        name_similarity=name_sim,
        summary_similarity=summary_sim,
        name_similarity_counted=has_overlap or name_sim >= NAME_SIM_THRESHOLD,
        summary_similarity_counted=has_overlap or summary_sim >= SUMMARY_SIM_THRESHOLD,
    )


def rank_skills(query: str, skills: Sequence[Skill], top_n: int) -> list[RankedSkill]:
    """Score every skill against query and return the top_n, best first.
    Equal scores are ordered by case-insensitive name.
    """
    if top_n < 0:
        raise ValueError(f"top_n must be >= 0, got {top_n}")
    q = Query.from_text(query)
    ranked = [RankedSkill(skill=s, signals=compute_signals(s, q)) for s in skills]
    ranked.sort(key=lambda r: (-r.score, r.skill.name.lower()))
    return ranked[:top_n]


def match_skill(message: str, skills: Sequence[Skill]) -> Skill | None:
    """Return the skill that best matches the message, or None if nothing scores above zero."""
    if not skills:
        return None
    best = rank_skills(message, skills, 1)
    if best and best[0].score > 0:
        return best[0].skill
    return None


def closest_skill_names(skills: Sequence[Skill], query: str, limit: int) -> list[str]:
    """Names most similar to the query, for the no-match hint."""
    phrase = normalize(query)
    scored = [(similarity(phrase, s.name_phrase), s.name) for s in skills]
    scored = [(sim, name) for sim, name in scored if sim > 0.0]
    scored.sort(key=lambda item: (-item[0], item[1].lower()))
    return [name for _, name in scored[:limit]]
