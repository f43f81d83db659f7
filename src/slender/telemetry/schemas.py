"""Validation of budget snapshot records against the packaged JSON Schema."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import jsonschema
from jsonschema import FormatChecker

SCHEMA_ROOT = Path(__file__).resolve().parent / "json_schemas"
BUDGET_SNAPSHOT_SCHEMA = SCHEMA_ROOT / "budget.snapshot.schema.json"


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class SnapshotValidator:
    """
    Checks snapshot records against one schema file.

    The schema is read on first use and the compiled validator kept, so a
    recorder appending many snapshots parses it once.

    Args:
        schema_path: Schema file; defaults to the packaged snapshot schema
    """

    def __init__(self, schema_path: Path = BUDGET_SNAPSHOT_SCHEMA) -> None:
        self.schema_path = Path(schema_path)
        self._validator: Optional[jsonschema.Validator] = None

    def _compiled(self) -> jsonschema.Validator:
        if self._validator is None:
            with self.schema_path.open("r", encoding="utf-8") as f:
                schema = json.load(f)
            validator_cls = jsonschema.validators.validator_for(schema)
            validator_cls.check_schema(schema)
            self._validator = validator_cls(schema, format_checker=FormatChecker())
        return self._validator

    def validate(self, record: dict[str, Any]) -> None:
        """
        Raises:
            SchemaValidationError: With one ``path: message`` line per violation
        """
        errors = sorted(self._compiled().iter_errors(record), key=lambda e: list(e.path))
        if errors:
            raise SchemaValidationError(
                f"Snapshot does not match {self.schema_path.name}.",
                errors=[f"{'/'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errors],
            )
