"""
JSON Schema checks for documents ralphwatch reads and writes.

Schemas live in ralphwatch/schemas/<name>.schema.json. Every violation is
reported, not just the first, so a rejected ledger edit shows the whole
problem at once.
"""

import json
from functools import lru_cache
from pathlib import Path

import jsonschema

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class SchemaError(Exception):
    """A document does not match its schema."""

    def __init__(self, schema_name: str, problems: list[str]):
        self.schema_name = schema_name
        self.problems = problems
        super().__init__(f"{schema_name}: " + "; ".join(problems))


@lru_cache(maxsize=None)
def _validator(schema_name: str) -> jsonschema.Draft7Validator:
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    schema = json.loads(schema_path.read_text())
    jsonschema.Draft7Validator.check_schema(schema)
    return jsonschema.Draft7Validator(schema)


def schema_problems(data, schema_name: str) -> list[str]:
    """Every violation as "<path>: <message>", in document order."""
    errors = sorted(_validator(schema_name).iter_errors(data), key=lambda e: list(e.absolute_path))
    problems = []
    for e in errors:
        where = ".".join(str(p) for p in e.absolute_path) or "(root)"
        problems.append(f"{where}: {e.message}")
    return problems


def validate(data, schema_name: str) -> None:
    """
    Raises:
        SchemaError: If data does not match the named schema
    """
    problems = schema_problems(data, schema_name)
    if problems:
        raise SchemaError(schema_name, problems)


def validate_before_write(data, schema_name: str, filepath: Path) -> None:
    """Refuse to write a document that would not read back.

    Raises:
        SchemaError: naming filepath and every violation
    """
    problems = schema_problems(data, schema_name)
    if problems:
        raise SchemaError(schema_name, [f"refusing to write {filepath}"] + problems)
