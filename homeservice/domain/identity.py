"""Authenticated requester as seen by the service layer."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    id: str
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or self.id
