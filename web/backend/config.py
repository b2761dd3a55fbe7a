#!/usr/bin/env python3
"""
Configuration management for the answer quality web application.

The config models live in core.config_loader so the CLI and the web app read
the same config.yaml and environment overrides.
"""

import os
from pathlib import Path
from functools import lru_cache

from core.config_loader import AppConfig, load_config


@lru_cache()
def get_config() -> AppConfig:
    """
    Get application configuration with caching.

    Loads from CONFIG_PATH (default: config.yaml at the project root) and
    applies environment variable overrides. Falls back to defaults when no
    file exists.

    Returns:
        AppConfig: The application configuration.
    """
    config_path = os.environ.get("CONFIG_PATH", str(get_project_root() / 'config.yaml'))
    return load_config(config_path)


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent
