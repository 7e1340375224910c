from pathlib import Path
from typing import Callable

import pytest
import yaml


@pytest.fixture
def write_rules() -> Callable[..., Path]:
    """Write a `{rules: [...]}` file with one record per id."""

    def _write(path: Path, *ids: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = {"rules": [{"id": rid, "name": f"Rule {rid}", "pattern": rid} for rid in ids]}
        path.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")
        return path

    return _write
