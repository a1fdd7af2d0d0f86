"""JSON output shared by commands."""

import json


def print_json(data: dict) -> None:
    """Print one JSON document to stdout."""
    print(json.dumps(data, indent=2))
