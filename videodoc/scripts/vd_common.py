"""
Shared utilities for vd CLI.

Error classification, response envelopes and settings.
"""

import json
import os
from typing import Any, Optional


# Error classification
class VDError(Exception):
    code = "UNKNOWN"
    suggestion = ""


class ValidationError(VDError):
    """Input validation errors."""
    code = "VALIDATION"
    suggestion = "Check the input parameters and file formats."


class ConfigError(VDError):
    """Configuration/setup errors."""
    code = "CONFIG"
    suggestion = "Check the VD_* environment variables."


class NarrationError(VDError):
    """Composition has nothing to narrate."""
    code = "NARRATION_ERROR"
    suggestion = ('Make sure captions use the text prop with a string literal: '
                  '<Caption text="Your narration text." />')


def classify_error(e: Exception) -> str:
    """Classify error for structured output."""
    if isinstance(e, VDError):
        return e.code
    if isinstance(e, FileNotFoundError):
        return "FILE_NOT_FOUND"
    if isinstance(e, json.JSONDecodeError):
        return "VALIDATION"

    error_str = str(e).lower()

    if "not found" in error_str or "missing" in error_str:
        return "FILE_NOT_FOUND"
    elif "invalid" in error_str or "format" in error_str:
        return "VALIDATION"
    else:
        return "UNKNOWN"


def get_suggestion(e: Exception) -> str:
    """Get actionable suggestion for error."""
    if isinstance(e, VDError) and e.suggestion:
        return e.suggestion

    code = classify_error(e)

    suggestions = {
        "FILE_NOT_FOUND": "Check that the input file path is correct and the file exists.",
        "VALIDATION": "Check the input parameters and file formats.",
        "CONFIG": "Check the VD_* environment variables.",
        "UNKNOWN": "Check the error message for details."
    }

    return suggestions.get(code, suggestions["UNKNOWN"])


def error_response(e: Exception, context: str = "") -> dict:
    """
    Create standardized error response dict from exception.

    Args:
        e: The exception that was raised
        context: Optional context about what operation failed

    Returns:
        Standardized error dict with success, error, code, suggestion
    """
    error_msg = f"{context}: {str(e)}" if context else str(e)

    return {
        "success": False,
        "error": error_msg,
        "code": classify_error(e),
        "suggestion": get_suggestion(e)
    }


def success_response(**kwargs) -> dict:
    """Create standardized success response dict."""
    return {"success": True, **kwargs}


# Settings
DEFAULT_FPS = 30
DEFAULT_PAUSE_S = 0.8
DEFAULT_VOICE = "pt-BR-Neural2-C"
DEFAULT_AUDIO_DIR = "./assets/audio"

SETTINGS = {
    "fps": {"env": "VD_FPS", "default": DEFAULT_FPS, "type": int},
    "pause_s": {"env": "VD_PAUSE_S", "default": DEFAULT_PAUSE_S, "type": float},
    "voice": {"env": "VD_VOICE", "default": DEFAULT_VOICE, "type": str},
    "audio_dir": {"env": "VD_AUDIO_DIR", "default": DEFAULT_AUDIO_DIR, "type": str},
}


def get_setting(name: str) -> Any:
    """
    Read a setting, letting its VD_* environment variable override the default.

    Raises:
        ConfigError: If the environment value cannot be parsed
    """
    config = SETTINGS[name]
    raw = os.environ.get(config["env"])
    if raw is None or raw.strip() == "":
        return config["default"]

    try:
        value = config["type"](raw.strip())
    except ValueError:
        raise ConfigError(f"Invalid value for {config['env']}: {raw!r}")

    if name == "fps" and value <= 0:
        raise ConfigError(f"Invalid value for {config['env']}: must be a positive integer, got {raw!r}")
    if name == "pause_s" and value < 0:
        raise ConfigError(f"Invalid value for {config['env']}: must be >= 0, got {raw!r}")
    return value


def preview_text(text: str, width: Optional[int] = 55, ellipsis: str = "…") -> str:
    """Truncate text for console previews."""
    if width is None or len(text) <= width:
        return text
    return text[:width] + ellipsis
