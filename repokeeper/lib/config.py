"""
Configuration loader for repokeeper.

Settings come from built-in defaults, an optional env file passed with
--env-file, and CLI arguments, in increasing order of precedence. Nothing
is read from the environment implicitly.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from . import envparse
from . import validate
from .constants import DEFAULT_BACKUP_TAG_PREFIX, DEFAULT_MAIN_BRANCH, DEFAULT_REMOTE

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes")


class ConfigError(Exception):
    """Settings could not be loaded."""


@dataclass
class KeeperConfig:
    """Settings shared by the sync and reset workflows."""
    repo_dir: Path
    remote: str = DEFAULT_REMOTE
    main_branch: str = DEFAULT_MAIN_BRANCH
    expected_remote_url: str | None = None  # reset only: add/correct the remote
    push_tags: bool = False                 # reset only: push --tags at the end
    backup_tag_prefix: str = DEFAULT_BACKUP_TAG_PREFIX
    network_timeout: float | None = None    # None = wait for git
    log_level: str = "INFO"


def load_settings_file(path: Path) -> dict[str, str]:
    """Load and validate a settings env file.

    Raises:
        ConfigError: if the file is missing, malformed, or fails validation
    """
    try:
        env = envparse.load_env(path)
    except (FileNotFoundError, ValueError) as e:
        raise ConfigError(str(e)) from e

    try:
        validate.validate(env, "config")
    except validate.ValidationError as e:
        raise ConfigError(f"{path}: {e}") from e

    return env


def build_config(
    repo_dir: str | Path,
    remote: str | None = None,
    main_branch: str | None = None,
    env_file: Path | None = None,
    expected_remote_url: str | None = None,
    push_tags: bool | None = None,
    verbose: bool = False,
) -> KeeperConfig:
    """Merge defaults, an optional settings file, and CLI overrides.

    CLI values of None mean "not given" and fall through to the file.
    """
    env = load_settings_file(env_file) if env_file else {}

    timeout = env.get("NETWORK_TIMEOUT")
    config = KeeperConfig(
        repo_dir=Path(repo_dir),
        remote=remote or env.get("REMOTE_NAME", DEFAULT_REMOTE),
        main_branch=main_branch or env.get("MAIN_BRANCH", DEFAULT_MAIN_BRANCH),
        expected_remote_url=expected_remote_url or env.get("EXPECTED_REMOTE_URL") or None,
        push_tags=env.get("PUSH_TAGS", "false").lower() in TRUE_VALUES,
        backup_tag_prefix=env.get("BACKUP_TAG_PREFIX", DEFAULT_BACKUP_TAG_PREFIX),
        network_timeout=float(timeout) if timeout and int(timeout) > 0 else None,
        log_level=env.get("LOG_LEVEL", "INFO"),
    )

    if push_tags is not None:
        config.push_tags = push_tags
    if verbose:
        config.log_level = "DEBUG"

    logger.debug(f"Loaded config: {config}")
    return config
