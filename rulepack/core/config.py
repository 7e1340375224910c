from __future__ import annotations
from pathlib import Path
import yaml
from typing import Dict, Any, List

from .errors import IoError, ParseError

CONFIG_NAMES = (".rulepackrc.yaml", ".rulepackrc.yml")


def load_repo_config(root: Path) -> Dict[str, Any]:
    """
    Load .rulepackrc.yaml or .rulepackrc.yml from `root`, if present.

    Relative entries under `rules` are resolved against `root`.
    """
    for name in CONFIG_NAMES:
        p = root / name
        if p.exists():
            try:
                cfg = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            except OSError as e:
                raise IoError.from_os_error(p, "Failed to read config", e) from e
            except yaml.YAMLError as e:
                raise ParseError(p, str(e).replace("\n", " ")) from e
            if not isinstance(cfg, dict):
                raise ParseError(p, "config must be a mapping")
            if cfg.get("rules"):
                cfg["rules"] = _resolve_rule_paths(root, cfg["rules"])
            return cfg
    return {}


def _resolve_rule_paths(root: Path, entries: Any) -> List[Path]:
    if isinstance(entries, (str, Path)):
        entries = [entries]
    return [root / str(e) for e in entries]
