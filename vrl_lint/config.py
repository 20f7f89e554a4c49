"""
Linter configuration.

Loaded from a JSON file such as::

    {
        "disabled_codes": ["suggest-null-coalescing"],
        "debounce_seconds": 0.5,
        "extra_functions_path": "custom_functions.json",
        "playground_url": "https://playground.vrl.dev/",
        "indent_size": 2
    }

A missing or invalid file never aborts start-up: the defaults are used and
the problem is logged.
"""

import json
import logging
import os
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "VRL_LINT_CONFIG"


class LinterConfig(BaseModel):
    disabled_codes: List[str] = Field(default_factory=list)
    debounce_seconds: float = Field(default=0.5, ge=0)
    extra_functions_path: Optional[str] = None
    playground_url: str = "https://playground.vrl.dev/"
    indent_size: int = Field(default=2, ge=1, le=8)


def load_config(path: Optional[str]) -> LinterConfig:
    if not path:
        return LinterConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info("Config file not found: %s, using defaults", path)
        return LinterConfig()
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        return LinterConfig()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read %s: %s", path, e)
        return LinterConfig()

    try:
        config = LinterConfig.model_validate(data)
    except ValidationError as e:
        logger.error("Invalid configuration in %s: %s", path, e)
        return LinterConfig()

    # Relative function files are resolved against the config file's directory
    if config.extra_functions_path and not os.path.isabs(config.extra_functions_path):
        base = os.path.dirname(os.path.abspath(path))
        config = config.model_copy(
            update={"extra_functions_path": os.path.join(base, config.extra_functions_path)}
        )
    logger.info("Loaded configuration from %s", path)
    return config


def config_from_env() -> LinterConfig:
    return load_config(os.environ.get(CONFIG_ENV_VAR))
