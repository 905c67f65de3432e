"""
CLI module for promptpack.

This module contains all CLI-related code, separated from core logic.
"""

from .main import main

__all__ = ["main"]
