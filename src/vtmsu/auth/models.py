"""
vtmsu.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
- Name the roles the API checks.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Role(enum.StrEnum):
    # Storytellers/organisers manage shared catalogs, hunting data, rules and the shop.
    admin = "admin"
    player = "player"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller. `user_id` is the `user.id` every creator column points at.
    """

    user_id: str
    roles: frozenset[str]

    @property
    def is_admin(self) -> bool:
        return Role.admin in self.roles
