from __future__ import annotations
import os
import stat
from enum import Enum
from pathlib import Path
from typing import FrozenSet, List, Tuple, Union

from .errors import InvalidInputError, IoError

# Same file-type class as `rg --type yaml`
RULE_FILE_EXTS = {".yaml", ".yml"}


class SourceKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


def resolve_source(path: Union[str, Path]) -> SourceKind:
    """
    Classify a user-supplied rules path, following symlinks.

    Anything that is not a regular file or a directory (missing path, broken
    symlink, fifo, device node) is rejected with InvalidInputError.
    """
    p = Path(path)
    try:
        mode = os.stat(p).st_mode
    except OSError:
        # any stat failure (missing, too long, no access) counts as neither
        raise InvalidInputError(p) from None
    if stat.S_ISREG(mode):
        return SourceKind.FILE
    if stat.S_ISDIR(mode):
        return SourceKind.DIRECTORY
    raise InvalidInputError(p)


def _dir_key(path: Path) -> Tuple[int, int]:
    try:
        st = os.stat(path)
    except OSError as e:
        raise IoError.from_os_error(path, "Failed to read directory", e) from e
    return (st.st_dev, st.st_ino)


def find_rule_files(root: Union[str, Path]) -> List[Path]:
    """
    Recursively collect YAML files under `root`, sorted by path.

    Symlinks are followed and ignore files (.gitignore and friends) are not
    honored; hidden entries are scanned too. A symlink that leads back to
    one of its own ancestor directories raises IoError, as does any
    directory that cannot be listed.
    """
    root = Path(root)
    found: List[Path] = []
    stack: List[Tuple[Path, FrozenSet[Tuple[int, int]]]] = [
        (root, frozenset([_dir_key(root)]))
    ]
    while stack:
        directory, ancestors = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            raise IoError.from_os_error(directory, "Failed to read directory", e) from e

        for entry in entries:
            p = Path(entry.path)
            try:
                is_dir = entry.is_dir()  # follows symlinks; False for broken links
            except OSError as e:
                raise IoError.from_os_error(p, "Failed to read directory entry", e) from e
            if is_dir:
                key = _dir_key(p)
                if key in ancestors:
                    raise IoError(
                        p,
                        "Symlink loop while scanning rules directory",
                        "points back to one of its parent directories",
                    )
                stack.append((p, ancestors | {key}))
            elif p.suffix in RULE_FILE_EXTS:
                found.append(p)

    found.sort()
    return found
