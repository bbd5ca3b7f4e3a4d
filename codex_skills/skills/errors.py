"""Errors raised while loading and looking up skills."""


class SkillError(Exception):
    """Base class for skill corpus errors."""


class ParseError(SkillError):
    """A skill file has a malformed or incomplete frontmatter block."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid YAML frontmatter in {source}: {reason}")


class SkillNotFoundError(SkillError, LookupError):
    """No skill matches the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Skill '{name}' not found")


class CorpusError(SkillError):
    """The skills directory or one of its files cannot be read."""
