"""
Configuration loading.

Settings are resolved once at startup from the process environment (and an
optional ``.env`` file) with command-line overrides, then passed explicitly to
every component.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigurationError
from .models import RenderMode

logger = logging.getLogger("contribs-generator.config")

DEFAULT_LIMIT = 24
DEFAULT_README = "README.md"
DEFAULT_SPRITE_PATH = "assets/contribs.svg"
DEFAULT_OUTPUT_DIR = "assets/contribs"
DEFAULT_CONTRIBUTION_TYPES: Tuple[str, ...] = ("PULL_REQUEST",)

CONTRIBUTION_TYPES = frozenset(
    ["COMMIT", "ISSUE", "PULL_REQUEST", "PULL_REQUEST_REVIEW", "REPOSITORY"]
)

_TRUTHY = {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    """Resolved run configuration."""
    token: str
    username: str
    limit: int = DEFAULT_LIMIT
    mode: RenderMode = RenderMode.INLINE
    contribution_types: Tuple[str, ...] = DEFAULT_CONTRIBUTION_TYPES
    exclude_own: bool = True
    readme_path: str = DEFAULT_README
    sprite_path: str = DEFAULT_SPRITE_PATH
    output_dir: str = DEFAULT_OUTPUT_DIR
    stage: bool = False
    log_level: str = "INFO"


def load_environment() -> None:
    """Load a ``.env`` file from the working directory, if one exists.

    Variables already present in the environment win.
    """
    path = os.path.join(os.getcwd(), ".env")
    if os.path.isfile(path):
        load_dotenv(path, override=False)
        logger.debug("Loaded environment from %s", path)


def _truthy(raw: Optional[str]) -> bool:
    if raw is None:
        return False
    return raw.strip().lower() in _TRUTHY


def parse_limit(raw: Optional[str], default: int = DEFAULT_LIMIT, source: str = "MAX_REPOS") -> int:
    """
    Parse the result-count limit.

    Args:
        raw: Raw value, from ``MAX_REPOS`` or ``--limit``
        default: Value used when ``raw`` is unset, not a base-10 integer,
                 or not positive
        source: Where ``raw`` came from, used in warnings

    Returns:
        A positive integer limit
    """
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip(), 10)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %d", source, raw, default)
        return default
    if value < 1:
        logger.warning("Ignoring non-positive %s=%r, using %d", source, raw, default)
        return default
    return value


def parse_contribution_types(raw: Optional[str]) -> Tuple[str, ...]:
    """Parse a comma-separated list of GraphQL ``RepositoryContributionType`` values."""
    if raw is None or not raw.strip():
        return DEFAULT_CONTRIBUTION_TYPES
    types = []
    for part in raw.split(","):
        name = part.strip().upper()
        if not name:
            continue
        if name not in CONTRIBUTION_TYPES:
            raise ConfigurationError(
                f"Unknown contribution type {name!r}; expected one of {', '.join(sorted(CONTRIBUTION_TYPES))}"
            )
        if name not in types:
            types.append(name)
    return tuple(types) or DEFAULT_CONTRIBUTION_TYPES


def load_settings(environ: Optional[Mapping[str, str]] = None, overrides: Optional[Any] = None) -> Settings:
    """
    Build Settings from the environment and command-line overrides.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)
        overrides: Parsed CLI namespace; attributes left as None fall back
                   to the environment

    Returns:
        Settings for this run

    Raises:
        ConfigurationError: If the token or the username cannot be resolved,
                            or the render mode/contribution types are invalid
    """
    env = os.environ if environ is None else environ

    def pick(attr: str, var: str) -> Optional[str]:
        value = getattr(overrides, attr, None) if overrides is not None else None
        if value is not None:
            return str(value)
        return env.get(var)

    token = env.get("GITHUB_TOKEN")
    if not token:
        raise ConfigurationError("GITHUB_TOKEN is required in env")

    username = pick("user", "TARGET_USER") or env.get("GITHUB_ACTOR")
    if not username:
        raise ConfigurationError("TARGET_USER or GITHUB_ACTOR must be set")

    raw_mode = pick("mode", "RENDER_MODE")
    try:
        mode = RenderMode.parse(raw_mode) if raw_mode else RenderMode.INLINE
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    include_own = bool(getattr(overrides, "include_own", False)) or _truthy(env.get("INCLUDE_OWN_REPOS"))
    stage = bool(getattr(overrides, "stage", False)) or _truthy(env.get("GIT_STAGE"))

    cli_limit = getattr(overrides, "limit", None) if overrides is not None else None
    if cli_limit is not None:
        limit_source = (str(cli_limit), DEFAULT_LIMIT, "--limit")
    else:
        limit_source = (env.get("MAX_REPOS"), DEFAULT_LIMIT, "MAX_REPOS")

    return Settings(
        token=token,
        username=username,
        limit=parse_limit(*limit_source),
        mode=mode,
        contribution_types=parse_contribution_types(pick("types", "CONTRIBUTION_TYPES")),
        exclude_own=not include_own,
        readme_path=pick("readme", "README_PATH") or DEFAULT_README,
        sprite_path=pick("sprite_path", "SPRITE_PATH") or DEFAULT_SPRITE_PATH,
        output_dir=pick("output_dir", "OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
        stage=stage,
        log_level=(pick("log_level", "LOG_LEVEL") or "INFO").upper(),
    )
