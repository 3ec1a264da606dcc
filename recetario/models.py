"""Recipe and ingredient data models."""

from dataclasses import dataclass, field, replace
from typing import Any

from .units import format_specification


@dataclass(frozen=True)
class Ingredient:
    """A named component of a recipe with optional quantity and unit."""

    name: str
    specification: int | float | None = None
    unit: str | None = None

    def __str__(self) -> str:
        detail = " ".join(
            part for part in (format_specification(self.specification), self.unit or "") if part
        )
        if detail:
            return f"{self.name} ({detail})"
        return self.name

    def to_dict(self) -> dict[str, Any]:
        """Convert ingredient to dictionary for serialization."""
        return {
            "name": self.name,
            "specification": self.specification,
            "unit": self.unit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ingredient":
        """Create ingredient from dictionary."""
        return cls(
            name=data["name"],
            specification=data.get("specification"),
            unit=data.get("unit"),
        )


@dataclass
class IngredientEntry:
    """A raw ingredient row as typed into the recipe form."""

    name: str = ""
    specification: str | int | float | None = None
    unit: str | None = None

    @property
    def is_blank(self) -> bool:
        return not (self.name or "").strip()


@dataclass
class Recipe:
    """A named dish with a description and an ordered ingredient list."""

    title: str
    ingredients: list[Ingredient] = field(default_factory=list)
    description: str | None = None
    id: int | None = None

    def with_id(self, recipe_id: int) -> "Recipe":
        """Return a copy carrying the given identifier."""
        return replace(self, id=recipe_id, ingredients=list(self.ingredients))

    def content_key(self) -> tuple:
        """Everything except the id, for comparing records across stores."""
        return (self.title, self.description, tuple(self.ingredients))

    def to_dict(self) -> dict[str, Any]:
        """Convert recipe to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "ingredients": [ing.to_dict() for ing in self.ingredients],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        """Create recipe from dictionary."""
        return cls(
            id=data.get("id"),
            title=data["title"],
            description=data.get("description"),
            ingredients=[Ingredient.from_dict(ing) for ing in data.get("ingredients") or []],
        )
