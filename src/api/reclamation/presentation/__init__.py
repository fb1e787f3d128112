"""Reclamation presentation layer."""

from __future__ import annotations

from reclamation.presentation.routes import router

__all__ = ["router"]
