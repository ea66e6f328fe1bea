# src/cartpole_ppo/utils/logging.py
"""
Logging convenience wrapper.
Usage:
    from cartpole_ppo.utils.logging import configure_logging, get_logger
    configure_logging(level="INFO", levels={"cartpole_ppo.rl.ppo": "DEBUG"})
    log = get_logger(__name__)
"""

import logging
import sys
from typing import Dict, Optional

# per-update PPO stats are logged here at DEBUG
UPDATE_LOGGER = "cartpole_ppo.rl.ppo"

def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)

def configure_logging(level: str = "INFO", fmt: Optional[str] = None, levels: Optional[Dict[str, str]] = None):
    """Root handler on stdout; `levels` overrides single loggers, e.g. update stats only."""
    if fmt is None:
        fmt = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"
    logging.basicConfig(stream=sys.stdout, level=_level(level), format=fmt, force=True)
    for name, lvl in (levels or {}).items():
        logging.getLogger(name).setLevel(_level(lvl))

def get_logger(name: str):
    return logging.getLogger(name)
