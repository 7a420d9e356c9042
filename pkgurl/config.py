import tomllib
import os
import logging
from typing import Dict, Any

CONFIG_FILE_PATH = "pyproject.toml"

DEFAULT_CONFIG = {
    "logging_level": "WARNING",
    "strict_scheme": False,  # If True, parse() rejects any scheme other than "pkg"
}

_TRUE_STRINGS = ("1", "true", "yes", "on")


def get_logging_level_from_string(level_str: str) -> int:
    """Converts a logging level string to its integer value."""
    return getattr(logging, level_str.upper(), logging.WARNING)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_STRINGS


def load_config() -> Dict[str, Any]:
    """
    Loads pkgurl configuration from the [tool.pkgurl] table of pyproject.toml.
    Falls back to default values if the file or specific keys are not found.
    Environment variables `PKGURL_LOGGING_LEVEL` and `PKGURL_STRICT_SCHEME`
    override the file.
    """
    config = DEFAULT_CONFIG.copy()

    try:
        with open(CONFIG_FILE_PATH, "rb") as f:
            data = tomllib.load(f)
            tool_config = data.get("tool", {}).get("pkgurl", {})

            if tool_config:
                config["logging_level"] = tool_config.get("logging_level", config["logging_level"])

                strict_scheme = tool_config.get("strict_scheme", config["strict_scheme"])
                if isinstance(strict_scheme, bool):
                    config["strict_scheme"] = strict_scheme
                else:
                    logging.getLogger(__name__).warning(
                        f"Invalid 'strict_scheme' in {CONFIG_FILE_PATH}. Using default. "
                        f"Expected a boolean, got: {strict_scheme!r}"
                    )

    except FileNotFoundError:
        logging.getLogger(__name__).debug(f"{CONFIG_FILE_PATH} not found. Using default configuration.")
    except tomllib.TOMLDecodeError:
        logging.getLogger(__name__).error(f"Error decoding {CONFIG_FILE_PATH}. Using default configuration.")
    except OSError as e:
        logging.getLogger(__name__).error(f"Could not read {CONFIG_FILE_PATH}: {e}. Using defaults.")

    # Environment variables override pyproject.toml settings.
    config["logging_level"] = os.getenv("PKGURL_LOGGING_LEVEL", config["logging_level"])
    if "PKGURL_STRICT_SCHEME" in os.environ:
        config["strict_scheme"] = _parse_bool(os.environ["PKGURL_STRICT_SCHEME"])

    config["logging_level_int"] = get_logging_level_from_string(str(config["logging_level"]))

    return config

# Load configuration once when the module is imported.
PKGURL_CONFIG = load_config()
