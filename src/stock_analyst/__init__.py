"""Gemini-backed single-ticker stock analysis dashboard."""
from __future__ import annotations

__version__ = "0.1.0"
