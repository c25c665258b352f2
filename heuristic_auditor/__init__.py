"""
Heuristic Auditor - usability heuristic evaluation for captured web pages.

This package decomposes a page screenshot into UI elements, analyzes the
markup structurally, evaluates each of Nielsen's ten heuristics with a
language model, cross-validates the findings and turns them into a score.
"""

__version__ = "1.0.0"
__author__ = "Heuristic Auditor Team"
