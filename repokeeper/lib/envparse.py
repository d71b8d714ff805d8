"""
Safe .env file parser for repokeeper settings files.

Parses KEY=value lines without shell execution. Values that look like
shell substitution are rejected: a settings file is data, never a script.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',          # AND chaining
    r'\|',          # pipe (also catches ||)
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_env_text(text: str, source: str = "<string>") -> dict[str, str]:
    """
    Parse KEY=value text into a dict.

    Blank lines and lines starting with '#' are skipped. An optional
    leading "export " is accepted so files can double as shell snippets.

    Raises:
        ValueError: if syntax invalid or forbidden pattern found
    """
    result = {}

    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        if line.startswith("export "):
            line = line[len("export "):].lstrip()

        if '=' not in line:
            raise ValueError(f"{source}:{lineno}: Invalid syntax (no '=')")

        key, _, value = line.partition('=')
        key = key.strip()
        value = _strip_quotes(value.strip())

        if not KEY_PATTERN.match(key):
            raise ValueError(f"{source}:{lineno}: Invalid key '{key}'")

        for pattern in FORBIDDEN_PATTERNS:
            if re.search(pattern, value):
                raise ValueError(f"{source}:{lineno}: Forbidden pattern in value of {key}")

        result[key] = value

    return result


def load_env(filepath: Path | str) -> dict[str, str]:
    """
    Parse env file safely, return dict.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env_text(path.read_text(), source=str(path))
