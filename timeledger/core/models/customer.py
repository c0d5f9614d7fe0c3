"""
Customer model — one entry of the customer directory.

Names are unique case-insensitively across the directory; project
names are unique case-insensitively within a customer.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


def name_key(name: str) -> str:
    """Comparison key for case-insensitive name matching."""
    return name.strip().casefold()


class Customer(BaseModel):
    """A customer and the projects time is booked against."""

    name: str
    email: str | None = None
    company_name: str = ""
    projects: list[str] = Field(default_factory=list)

    def has_project(self, project_name: str) -> bool:
        """Whether a project with this name exists (case-insensitive)."""
        key = name_key(project_name)
        return any(name_key(p) == key for p in self.projects)
