"""
Web module for the heuristic auditor.

Provides a Flask-based JSON API for running evaluations.
"""

from .app import create_app

__all__ = ["create_app"]
