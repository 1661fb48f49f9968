"""Utilities - upload handling."""
