from __future__ import annotations
import sys
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Sequence, Tuple, Union

from .discovery import SourceKind

PathLike = Union[str, Path]


class LoadObserver:
    """
    Hooks called by the loaders at fixed points of a load.

    Every hook is a no-op here; subclasses override what they care about.
    Return values are ignored and hooks must not change the load.
    """

    def source_resolved(self, path: PathLike, kind: SourceKind) -> None:
        pass

    def files_found(self, root: PathLike, files: Sequence[Path]) -> None:
        pass

    def file_parsed(self, path: PathLike, count: int) -> None:
        pass

    def batch_complete(self, count: int, num_sources: int, unit: str) -> None:
        pass


NULL_OBSERVER = LoadObserver()


class DebugObserver(LoadObserver):
    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream

    def _print(self, msg: str) -> None:
        print(f"[rulepack] {msg}", file=self._stream or sys.stderr)

    def source_resolved(self, path: PathLike, kind: SourceKind) -> None:
        self._print(f"Resolved {path} as {kind.value}")

    def files_found(self, root: PathLike, files: Sequence[Path]) -> None:
        self._print(f"Found {len(files)} rules files to load within {root}")

    def file_parsed(self, path: PathLike, count: int) -> None:
        self._print(f"Loaded {count} rules from {path}")

    def batch_complete(self, count: int, num_sources: int, unit: str) -> None:
        self._print(f"Loaded {count} rules from {num_sources} {unit}")


class RecordingObserver(LoadObserver):
    """Keeps every event as an (event name, payload) pair, in call order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def source_resolved(self, path: PathLike, kind: SourceKind) -> None:
        self.events.append(("source_resolved", {"path": path, "kind": kind}))

    def files_found(self, root: PathLike, files: Sequence[Path]) -> None:
        self.events.append(("files_found", {"root": root, "files": list(files)}))

    def file_parsed(self, path: PathLike, count: int) -> None:
        self.events.append(("file_parsed", {"path": path, "count": count}))

    def batch_complete(self, count: int, num_sources: int, unit: str) -> None:
        self.events.append(
            ("batch_complete", {"count": count, "num_sources": num_sources, "unit": unit})
        )

    def names(self) -> List[str]:
        return [name for name, _ in self.events]
