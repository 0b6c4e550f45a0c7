"""Timestamp generation helpers."""

from .dates import generate_dates

__all__ = ["generate_dates"]
