"""Load configuration from the environment and an optional TOML config file."""
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from codex_skills.logging_utils import get_logger

load_dotenv()

logger = get_logger(__name__)

# Defaults
DEFAULT_TOP = 3
DEFAULT_CLIP_LENGTH = 80
DEFAULT_SKILLS_DIR = Path("skills")

# Environment
SKILLS_DIR_ENV = "CODEX_SKILLS_DIR"
TOP_ENV = "CODEX_SKILLS_TOP"
CLIP_ENV = "CODEX_SKILLS_CLIP"
CONFIG_PATH_ENV = "CODEX_SKILLS_CONFIG"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()


@dataclass
class Config:
    """Caller-side defaults. The ranking engine never reads these directly."""

    default_top: int = DEFAULT_TOP
    clip_length: int = DEFAULT_CLIP_LENGTH
    skills_dir: Path | None = None

    def get_default_top(self) -> int:
        return self.default_top if self.default_top > 0 else DEFAULT_TOP

    def get_clip_length(self) -> int:
        return self.clip_length if self.clip_length > 0 else DEFAULT_CLIP_LENGTH

    def get_skills_dir(self) -> Path:
        return self.skills_dir or DEFAULT_SKILLS_DIR


def config_search_paths() -> list[Path]:
    """Candidate config files, most specific first."""
    paths: list[Path] = []
    explicit = os.getenv(CONFIG_PATH_ENV)
    if explicit:
        paths.append(Path(explicit).expanduser())
    paths.append(Path(".codex-skills.toml"))
    paths.append(Path("codex-skills.toml"))
    home = os.getenv("HOME")
    if home:
        paths.append(Path(home) / ".config" / "codex-skills" / "config.toml")
    return paths


def _positive_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _config_from_mapping(data: dict) -> Config:
    skills_dir = data.get("skills_dir")
    return Config(
        default_top=_positive_int(data.get("default_top"), DEFAULT_TOP),
        clip_length=_positive_int(data.get("clip_length"), DEFAULT_CLIP_LENGTH),
        skills_dir=Path(skills_dir).expanduser() if isinstance(skills_dir, str) and skills_dir else None,
    )


def load_config_file(paths: list[Path]) -> Config:
    """Return the config from the first existing, valid file in paths, else defaults."""
    for path in paths:
        if not path.is_file():
            continue
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("config_file_invalid", path=str(path), error=str(e))
            continue
        logger.debug("config_file_loaded", path=str(path))
        return _config_from_mapping(data)
    return Config()


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("config_env_invalid", variable=name, value=raw)
        return None
    if value <= 0:
        logger.warning("config_env_invalid", variable=name, value=raw)
        return None
    return value


def apply_env_overrides(config: Config) -> Config:
    """Environment variables win over config file values."""
    top = _env_int(TOP_ENV)
    if top is not None:
        config.default_top = top
    clip = _env_int(CLIP_ENV)
    if clip is not None:
        config.clip_length = clip
    skills_dir = os.getenv(SKILLS_DIR_ENV)
    if skills_dir:
        config.skills_dir = Path(skills_dir).expanduser()
    return config


def load_config(paths: list[Path] | None = None) -> Config:
    """Config file (first match of config_search_paths) overlaid with environment variables."""
    config = load_config_file(paths if paths is not None else config_search_paths())
    return apply_env_overrides(config)
