"""Project configuration from ``.nesting_indexer/config.yml``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import yaml

from nesting_indexer.reindexer import DEFAULT_HOP_CEILING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = ".nesting_indexer"
CONFIG_FILE = "config.yml"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class IndexerConfig:
    """Settings for CLI-driven reindexing passes."""

    hop_ceiling: int = DEFAULT_HOP_CEILING
    strict: bool = False
    graph_dir: str = f"{CONFIG_DIR}/_graph"
    db_path: str = f"{CONFIG_DIR}/index.db"
    log_level: str = "WARNING"


def config_path(project_root: Path) -> Path:
    return project_root / CONFIG_DIR / CONFIG_FILE


def load_config(project_root: Path) -> IndexerConfig:
    """Load the project config, falling back to defaults for missing keys.

    An unreadable file or a document that is not a mapping is logged and
    ignored.

    Raises
    ------
    ValueError
        If ``hop_ceiling`` is present but not a positive integer.
    """
    path = config_path(project_root)
    if not path.is_file():
        return IndexerConfig()

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        logger.warning("Failed to read %s, using defaults", path)
        return IndexerConfig()

    if data is None:
        return IndexerConfig()
    if not isinstance(data, dict):
        logger.warning("%s is not a mapping, using defaults", path)
        return IndexerConfig()

    defaults = IndexerConfig()

    hop_ceiling = data.get("hop_ceiling", defaults.hop_ceiling)
    if isinstance(hop_ceiling, bool) or not isinstance(hop_ceiling, int) or hop_ceiling < 1:
        msg = f"hop_ceiling must be a positive integer, got {hop_ceiling!r}"
        raise ValueError(msg)

    log_level = str(data.get("log_level", defaults.log_level)).upper()
    if log_level not in _LOG_LEVELS:
        logger.warning("Unknown log_level %r, using %s", log_level, defaults.log_level)
        log_level = defaults.log_level

    strict = data.get("strict", defaults.strict)
    if not isinstance(strict, bool):
        logger.warning("strict must be true or false, got %r, using %s", strict, defaults.strict)
        strict = defaults.strict

    graph_dir = data.get("graph_dir")
    db_path = data.get("db_path")
    return IndexerConfig(
        hop_ceiling=hop_ceiling,
        strict=strict,
        graph_dir=graph_dir if isinstance(graph_dir, str) and graph_dir else defaults.graph_dir,
        db_path=db_path if isinstance(db_path, str) and db_path else defaults.db_path,
        log_level=log_level,
    )


def resolve_graph_dir(project_root: Path, config: IndexerConfig) -> Path:
    return project_root / config.graph_dir


def resolve_db_path(project_root: Path, config: IndexerConfig) -> Path:
    return project_root / config.db_path
