"""Launcher-style search over windows, browser tabs, applications and history."""

__version__ = "0.1.0"
