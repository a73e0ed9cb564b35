"""Shared utilities: paths, logging and file locking."""
