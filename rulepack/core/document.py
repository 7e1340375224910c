from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable, List, Union

import yaml

from .errors import IoError, ParseError


def parse_rules_document(data: Union[bytes, str], path: Union[str, Path]) -> List[Any]:
    """
    Deserialize one `{rules: [...]}` document.

    Records are returned in document order and are not inspected; `path` is
    only used to attribute errors.
    """
    try:
        doc = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ParseError(path, str(e).replace("\n", " ")) from e

    if doc is None:
        raise ParseError(path, "empty document, missing field `rules`")
    if not isinstance(doc, dict):
        raise ParseError(path, f"expected a mapping, found {type(doc).__name__}")
    if "rules" not in doc:
        raise ParseError(path, "missing field `rules`")
    rules = doc["rules"]
    if not isinstance(rules, list):
        raise ParseError(
            path, f"field `rules` must be a list, found {type(rules).__name__}"
        )
    return rules


def read_rules_file(path: Path) -> List[Any]:
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise IoError.from_os_error(path, "Failed to read rules file", e) from e
    return parse_rules_document(data, path)


def dump_rules_document(rules: Iterable[Any]) -> str:
    return yaml.safe_dump(
        {"rules": list(rules)},
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
