"""
Generation policy configuration.

Loads the packaged generation.yaml defaults and merges an optional override
file given by GENERATION_CONFIG_PATH. Later values win key by key.

Examples:
    >>> config = load_generation_config()
    >>> config.selection.max_experiences
    5
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf

load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "generation.yaml"
DEFAULT_TEMPLATE_PATH = DEFAULT_CONFIG_PATH.parent / "templates" / "default.tex"


def _override_path() -> Optional[Path]:
    value = os.getenv("GENERATION_CONFIG_PATH")
    return Path(value) if value else None


def read_generation_config(override_path: Optional[Path] = None) -> DictConfig:
    """
    Read generation config from disk without caching.

    Args:
        override_path: Optional YAML whose keys override the packaged defaults

    Returns:
        Merged, read-only DictConfig

    Raises:
        FileNotFoundError: If override_path is given but does not exist
    """
    config = OmegaConf.load(DEFAULT_CONFIG_PATH)

    if override_path is not None:
        if not override_path.exists():
            raise FileNotFoundError(f"Generation config override not found: {override_path}")
        config = OmegaConf.merge(config, OmegaConf.load(override_path))

    OmegaConf.set_readonly(config, True)
    return config


@lru_cache(maxsize=1)
def load_generation_config() -> DictConfig:
    """Process-wide generation config (defaults merged with GENERATION_CONFIG_PATH)."""
    return read_generation_config(_override_path())
