"""Core module - configuration, logging, errors, auth and locking."""
