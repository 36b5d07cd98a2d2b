"""Server configuration.

`Config` holds everything `create_app` needs to compose a store. It can be
built directly (tests, dev server) or loaded from a YAML file:

    data_dir: data
    storage_backend: file
    serializer: yaml
    collection: objects
    key_field: id
    log_level: info
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    data_dir: str = "data"
    storage_backend: str = "file"
    serializer: str = "json"
    collection: str = "objects"
    # Mapping entry / attribute holding an embedded key; None disables it
    key_field: Optional[str] = "id"
    issue_keys: bool = True
    # Only used by the encrypted serializer
    password: Optional[str] = None
    log_level: Optional[str] = None


def load_config(path: str | Path) -> Config:
    """Load a `Config` from a YAML mapping. A missing file gives defaults."""
    p = Path(path)
    if not p.exists():
        logger.info("No config at %s, using defaults", p)
        return Config()
    with p.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {p} must contain a mapping")

    known = {f.name for f in fields(Config)}
    for name in sorted(set(raw) - known):
        logger.warning("Ignoring unknown config key '%s' in %s", name, p)
    return Config(**{k: v for k, v in raw.items() if k in known})
