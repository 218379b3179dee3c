"""Courier — Telegram channel adapter for agent backends."""

__version__ = "0.1.0"
