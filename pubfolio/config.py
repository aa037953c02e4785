"""Project configuration for the Pubfolio CLI.

Key functions:
- load_config: Loads configuration from pubfolio.yaml in the project root.
- publications_dir: Resolves the publications directory for a project.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "pubfolio.yaml"

DEFAULT_CONFIG = {
    "publications_dir": "data/publications",
    "filename_words": 2,
}


def load_config(project_root: Path) -> dict[str, Any]:
    """Load configuration from pubfolio.yaml.

    Args:
        project_root: Root directory of the blog project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def publications_dir(project_root: Path, config: dict[str, Any]) -> Path:
    """Resolve the configured publications directory against the project root."""
    return project_root / str(config.get("publications_dir") or "data/publications")
