# src/alloccheck/__init__.py
"""Validation engine for client / worker / task allocation spreadsheets."""

__version__ = "0.1.0"
