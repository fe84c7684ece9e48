"""
Application Configuration Persistence
======================================

This module manages the serialization and deserialization of the catalog
connection settings, so the shop URL, access token, and media root do not
have to be passed on every run.

Key Responsibilities:
---------------------
- File-System Persistence: Stores config in a hidden JSON file in the
  user's home directory (`~/.catalog_dedup_config.json`).
- Environment Overrides: `MAGENTO_*` variables take precedence over the file.
- Security Logging: Records save/load events while redacting the token.
"""

import json
import logging
import os
from pathlib import Path
from dataclasses import asdict
from typing import Mapping, Optional

from src.core.session import Session
from src.utils.logger import log_config

CONFIG_PATH = Path.home() / ".catalog_dedup_config.json"

# Environment variable -> CatalogConfig attribute
ENV_OVERRIDES = {
    "MAGENTO_BASE_URL": "base_url",
    "MAGENTO_ACCESS_TOKEN": "access_token",
    "MAGENTO_STORE_CODE": "store_code",
    "MAGENTO_MEDIA_ROOT": "media_root",
}


def save_config(session: Session, path: Optional[Path] = None) -> bool:
    """
    Persist the catalog settings of the session to the configuration file.

    Args:
        session: The Session holding the settings to save.
        path: Target file (defaults to CONFIG_PATH).

    Returns:
        bool: True if the file was written.
    """
    logger = logging.getLogger(__name__)
    path = Path(path) if path else CONFIG_PATH

    try:
        data = {"catalog": asdict(session.catalog)}

        log_config("Saving Configuration", data, logger)

        with open(path, "w") as f:
            json.dump(data, f, indent=2)

        logger.info(f"Configuration saved successfully to {path}")
        return True

    except Exception as e:
        logger.error(f"Failed to save configuration: {e}", exc_info=True)
        return False


def load_config(session: Session, path: Optional[Path] = None) -> bool:
    """
    Load and apply configuration from the hidden JSON file.

    Only keys matching attributes of `CatalogConfig` are applied. A missing
    or corrupted file leaves the session untouched.

    Args:
        session: The Session object to be populated with loaded data.
        path: Source file (defaults to CONFIG_PATH).

    Returns:
        bool: True if a configuration file was applied.
    """
    logger = logging.getLogger(__name__)
    path = Path(path) if path else CONFIG_PATH

    if not path.exists():
        logger.info(f"No existing configuration file found at {path}")
        return False

    try:
        logger.info(f"Loading configuration from {path}")

        with open(path, "r") as f:
            data = json.load(f)

        log_config("Loaded Configuration", data, logger)

        for k, v in (data.get("catalog") or {}).items():
            if hasattr(session.catalog, k):
                if k == "access_token" and isinstance(v, str):
                    v = v.strip()
                setattr(session.catalog, k, v)

        logger.info("Configuration loaded and applied successfully")
        return True

    except json.JSONDecodeError as e:
        logger.error(f"Configuration file is corrupted: {e}", exc_info=True)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}", exc_info=True)
    return False


def apply_environment(session: Session, environ: Optional[Mapping[str, str]] = None) -> None:
    """Override catalog settings from MAGENTO_* environment variables."""
    logger = logging.getLogger(__name__)
    environ = os.environ if environ is None else environ

    for var, attr in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            setattr(session.catalog, attr, value.strip())
            logger.debug(f"Applied {var} from environment")
