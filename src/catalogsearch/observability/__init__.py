"""Observability — logging setup."""
