"""Unit vocabulary and quantity parsing for recipe ingredients."""

import math
from typing import Literal

UnitType = Literal["mass", "volume", "count", "culinary"]

# The fixed vocabulary, in the order the ingredient form offers it
UNITS: dict[str, UnitType] = {
    "uds": "count",
    "unidad": "count",
    "gr": "mass",
    "kg": "mass",
    "mg": "mass",
    "ml": "volume",
    "l": "volume",
    "cucharada": "culinary",
    "cucharadita": "culinary",
    "taza": "culinary",
    "pizca": "culinary",
    "paquete": "count",
    "bote": "count",
}

# Common spellings mapped onto the vocabulary
UNIT_ALIASES: dict[str, str] = {
    "ud": "uds",
    "u": "uds",
    "unidades": "uds",
    "g": "gr",
    "gramo": "gr",
    "gramos": "gr",
    "kilo": "kg",
    "kilos": "kg",
    "kilogramo": "kg",
    "kilogramos": "kg",
    "miligramo": "mg",
    "miligramos": "mg",
    "mililitro": "ml",
    "mililitros": "ml",
    "litro": "l",
    "litros": "l",
    "cucharadas": "cucharada",
    "cda": "cucharada",
    "cucharaditas": "cucharadita",
    "cdta": "cucharadita",
    "tazas": "taza",
    "pizcas": "pizca",
    "paquetes": "paquete",
    "botes": "bote",
}


class UnitError(ValueError):
    """Raised when a unit or quantity cannot be understood."""

    pass


def normalize_unit(unit: str | None) -> str | None:
    """
    Map a raw unit string onto the vocabulary.

    Args:
        unit: Raw unit text (may be None or blank)

    Returns:
        Vocabulary unit, or None when no unit was given

    Raises:
        UnitError: If the unit is not known
    """
    if unit is None:
        return None

    unit_lower = unit.strip().lower()
    if not unit_lower:
        return None

    if unit_lower in UNITS:
        return unit_lower
    if unit_lower in UNIT_ALIASES:
        return UNIT_ALIASES[unit_lower]

    raise UnitError(f"Unknown unit '{unit.strip()}'")


def get_unit_type(unit: str | None) -> UnitType | None:
    """Get the type of a unit, or None for unknown/missing units."""
    try:
        normalized = normalize_unit(unit)
    except UnitError:
        return None
    if normalized is None:
        return None
    return UNITS[normalized]


def parse_specification(value: str | int | float | None) -> int | float | None:
    """
    Parse a raw quantity into a positive number.

    Accepts numbers or text, with either '.' or ',' as decimal separator.
    Integral values come back as int.

    Raises:
        UnitError: If the value is not a positive finite number
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise UnitError(f"Invalid quantity '{value}'")

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            raise UnitError(f"Invalid quantity '{value.strip()}'") from None

    if not math.isfinite(number) or number <= 0:
        raise UnitError(f"Quantity must be a positive number, got '{value}'")

    if number.is_integer():
        return int(number)
    return number


def format_specification(value: int | float | None) -> str:
    """Format a quantity for display (3, 0.5, 1.25)."""
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def units_by_type() -> dict[UnitType, list[str]]:
    """Group the vocabulary by unit type, keeping vocabulary order."""
    grouped: dict[UnitType, list[str]] = {}
    for unit, unit_type in UNITS.items():
        grouped.setdefault(unit_type, []).append(unit)
    return grouped
