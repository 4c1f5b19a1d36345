import json
import urllib.request
from pathlib import Path

import click

from data.generator import FIXTURE_FILE

FETCH_TIMEOUT = 10


def find_fixture(path: Path | None = None) -> Path:
    """Return the fixture path, failing with a hint if it has not been generated."""
    if path is None:
        path = FIXTURE_FILE

    if not path.exists():
        raise click.ClickException(
            f"Fixture {path} not found. "
            "Run 'python cli.py generate' to create it and try again."
        )
    return path


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_claims(source: str | Path) -> list[dict]:
    """Fetch the raw claim objects with a single GET (URL) or file read (path).

    Errors propagate to the caller; nothing is retried.
    """
    if isinstance(source, str) and is_url(source):
        with urllib.request.urlopen(source, timeout=FETCH_TIMEOUT) as resp:
            data = json.loads(resp.read())
    else:
        with open(source, encoding="utf-8") as f:
            data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array of claims from {source}, got {type(data).__name__}")
    return data
