from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union

import yaml

from .discovery import SourceKind, find_rule_files, resolve_source
from .document import parse_rules_document, read_rules_file
from .errors import InvalidInputError, IoError, ParseError
from .events import NULL_OBSERVER, LoadObserver

RULES_DIR = Path(__file__).resolve().parents[1] / "rules"

PathLike = Union[str, Path]


class Rules:
    """
    Ordered collection of rule records.

    Records are opaque values; the collection only grows (merge/extend) and
    keeps them in the order they were merged.
    """

    def __init__(self, records: Iterable[Any] = ()) -> None:
        self._records: List[Any] = list(records)

    def merge(self, other: Iterable[Any]) -> None:
        self._records.extend(list(other))

    extend = merge

    def is_empty(self) -> bool:
        return not self._records

    def iter(self) -> Iterator[Any]:
        return iter(self._records)

    @property
    def records(self) -> Tuple[Any, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rules):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"Rules({len(self._records)} rules)"


# ----------------------- Loaders -------------------------------------------


def load_rules_file(path: PathLike, observer: Optional[LoadObserver] = None) -> Rules:
    observer = observer or NULL_OBSERVER
    rules = Rules(read_rules_file(Path(path)))
    observer.file_parsed(path, len(rules))
    return rules


def load_rules_from_files(
    paths: Iterable[PathLike], observer: Optional[LoadObserver] = None
) -> Rules:
    observer = observer or NULL_OBSERVER
    rules = Rules()
    num_paths = 0
    for p in paths:
        num_paths += 1
        rules.merge(load_rules_file(p, observer))
    observer.batch_complete(len(rules), num_paths, "files")
    return rules


def load_rules_from_directory(
    path: PathLike, observer: Optional[LoadObserver] = None
) -> Rules:
    observer = observer or NULL_OBSERVER
    files = find_rule_files(path)
    observer.files_found(path, files)
    return load_rules_from_files(files, observer)


def load_rules_from_paths(
    paths: Iterable[PathLike], observer: Optional[LoadObserver] = None
) -> Rules:
    """
    Load rules from paths that may each be a YAML file or a directory.

    Paths are handled in order and the first failure is raised; nothing
    loaded before it is returned.
    """
    observer = observer or NULL_OBSERVER
    rules = Rules()
    num_paths = 0
    for p in paths:
        num_paths += 1
        kind = resolve_source(p)
        observer.source_resolved(p, kind)
        if kind is SourceKind.FILE:
            rules.merge(load_rules_file(p, observer))
        else:
            rules.merge(load_rules_from_directory(p, observer))
    observer.batch_complete(len(rules), num_paths, "paths")
    return rules


def load_rules_from_contents(
    sources: Iterable[Tuple[PathLike, Union[bytes, str]]],
    observer: Optional[LoadObserver] = None,
) -> Rules:
    """
    Parse in-memory documents given as (path label, contents) pairs.

    Nothing touches the filesystem; the label only names the source in
    errors and events.
    """
    observer = observer or NULL_OBSERVER
    rules = Rules()
    num_sources = 0
    for label, contents in sources:
        num_sources += 1
        records = parse_rules_document(contents, label)
        observer.file_parsed(label, len(records))
        rules.merge(records)
    observer.batch_complete(len(rules), num_sources, "sources")
    return rules


# ----------------------- Bundled rulepacks ---------------------------------


def _read_index() -> dict:
    idx_path = RULES_DIR / "index.yaml"
    try:
        index = yaml.safe_load(idx_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise IoError.from_os_error(idx_path, "Failed to read rulepack index", e) from e
    except yaml.YAMLError as e:
        raise ParseError(idx_path, str(e).replace("\n", " ")) from e
    index = index or {}
    if not isinstance(index, dict):
        raise ParseError(idx_path, "index must be a mapping")
    return index


def available_packs() -> List[str]:
    return [str(label) for label in (_read_index().get("packs") or [])]


def latest_pack() -> str:
    return str(_read_index().get("latest", "v0.1"))


def _resolve_pack_dir(label: str) -> Path:
    if label == "latest":
        label = latest_pack()
    if label not in available_packs():
        raise InvalidInputError(
            label, "is not a bundled rulepack", message="Unknown rulepack"
        )
    return RULES_DIR / label


def _pack_contents(label: str, pack_dir: Path) -> List[Tuple[str, bytes]]:
    # Load both .yml and .yaml
    yfiles = sorted(list(pack_dir.glob("*.yml")) + list(pack_dir.glob("*.yaml")))
    contents: List[Tuple[str, bytes]] = []
    for y in yfiles:
        try:
            contents.append((f"builtin:{label}/{y.name}", y.read_bytes()))
        except OSError as e:
            raise IoError.from_os_error(y, "Failed to read rules file", e) from e
    return contents


def load_rules(label: str = "latest", observer: Optional[LoadObserver] = None) -> Rules:
    """Load one of the rulepacks shipped with this package."""
    pack_dir = _resolve_pack_dir(label)
    name = pack_dir.name
    return load_rules_from_contents(_pack_contents(name, pack_dir), observer)
