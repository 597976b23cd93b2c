"""Shared helpers for the CLI and the bot."""
