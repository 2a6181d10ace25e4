"""Utility modules for the window finder."""

from .applescript import AppleScriptExecutor, escape_applescript_string, parse_error_code

__all__ = ["AppleScriptExecutor", "escape_applescript_string", "parse_error_code"]
