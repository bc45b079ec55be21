from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ScientistRecord:
    """In-memory representation of a row in the SCIENTIST table.

    Attributes:
        id: Opaque primary key (None for records not yet stored).
        name: Display name.
        subject: Field of study.
        title: Optional honorific or short title.
        description: Optional free-text biography.
        achievements: Optional free-text list of achievements.
        birth_year: Optional year of birth.
        death_year: Optional year of death.
        color: Accent color (hex string) used by the frontend.
        image: Asset identifier of the uploaded portrait, never a URL.
        created_at: ISO-8601 UTC timestamp set on insert.
        updated_at: ISO-8601 UTC timestamp set on every write.
    """

    id: Optional[str]
    name: str
    subject: str
    title: Optional[str] = None
    description: Optional[str] = None
    achievements: Optional[str] = None
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    color: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        """Return the camelCase JSON shape the frontend consumes (no derived URLs)."""
        return {
            "id": self.id,
            "name": self.name,
            "subject": self.subject,
            "title": self.title,
            "description": self.description,
            "achievements": self.achievements,
            "birthYear": self.birth_year,
            "deathYear": self.death_year,
            "color": self.color,
            "image": self.image,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
