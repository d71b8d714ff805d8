"""Shared constants for repokeeper."""

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1          # precondition failure, declined confirmation, rejected force-push
EXIT_CONFIG_ERROR = 2   # bad settings file or arguments

# Defaults for the positional CLI arguments
DEFAULT_REPO_DIR = "."
DEFAULT_REMOTE = "origin"
DEFAULT_MAIN_BRANCH = "main"

# One timestamp per run, shared by every commit message and the backup tag
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

# Commit messages
WIP_COMMIT_MSG = "chore: save WIP on {branch} ({timestamp})"
FINAL_WIP_COMMIT_MSG = "chore: final WIP before full reset ({timestamp})"
FRESH_START_COMMIT_MSG = "feat: fresh start ({timestamp})"

# Hard reset
DEFAULT_BACKUP_TAG_PREFIX = "pre-reset-backup"
TEMP_ORPHAN_BRANCH = "__temp_reset_orphan__"
CONFIRM_TOKEN = "YES"
