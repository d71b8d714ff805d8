"""
Schema validation for repokeeper settings.

Settings loaded from an env file are validated against a JSON Schema
before they are turned into a KeeperConfig. Fails hard with a clear
error when a key is unknown or a value is malformed.
"""

import json
from importlib import resources

import jsonschema


class ValidationError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


# Cache loaded schemas
_schema_cache: dict[str, dict] = {}


def _load_schema(schema_name: str) -> dict:
    """Load schema by name from the bundled schemas package, with caching."""
    if schema_name not in _schema_cache:
        schema_file = resources.files("repokeeper.schemas") / f"{schema_name}.schema.json"
        if not schema_file.is_file():
            raise ValidationError(schema_name, f"Schema file not found: {schema_file}")
        _schema_cache[schema_name] = json.loads(schema_file.read_text())
    return _schema_cache[schema_name]


def validate(data: dict, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Dictionary to validate
        schema_name: Schema name (e.g., "config")

    Raises:
        ValidationError: If validation fails
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise ValidationError(schema_name, e.message, path) from None
