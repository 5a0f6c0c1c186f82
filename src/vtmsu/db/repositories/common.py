"""
vtmsu.db.repositories.common

Helpers shared by repositories.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import inspect

from vtmsu.db.base import Base


def apply_changes(row: Base, changes: Mapping[str, Any]) -> None:
    # Only plain column attributes may be patched; relationships go through dedicated methods.
    allowed = set(inspect(type(row)).column_attrs.keys())
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"unknown fields for {type(row).__name__}: {sorted(unknown)}")
    for key, value in changes.items():
        setattr(row, key, value)
