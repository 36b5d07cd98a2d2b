from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional


def configure_logging(level: Optional[str] = None, config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for the application.

    The level is taken from `level` if given, otherwise from the
    `log_level` entry of the YAML config at `config_path`, otherwise
    WARNING. Returns a module logger for the caller.
    """
    default_level = logging.WARNING

    name = level
    if name is None and config_path is not None and Path(config_path).exists():
        try:
            with Path(config_path).open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
            if isinstance(_cfg, dict):
                name = _cfg.get('log_level')
        except (OSError, yaml.YAMLError):
            logging.getLogger(__name__).warning('Could not read log level from %s', config_path)
    if isinstance(name, str):
        _numeric = getattr(logging, name.upper(), None)
        if isinstance(_numeric, int):
            default_level = _numeric

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=default_level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logger.info("Log level set to %s", logging.getLevelName(default_level))

    return logger
