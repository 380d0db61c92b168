"""Typed reader for one section of the YAML config.

Every NdlSearch section (``log``, ``sru``, ``opensearch``, ``retry``,
``output``) is an optional, flat mapping. ``ConfigSection`` reads its keys with
built-in defaults and names the offending ``section.key`` in every error.

Errors
- wrong type (or a misspelled key)  -> TypeError / ValueError
- value outside its domain          -> ValueError
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Collection, Mapping, Optional, Sequence


@dataclass(frozen=True, slots=True)
class ConfigSection:
    """One config section plus its name for error messages."""

    name: str
    values: Mapping[str, Any]

    @classmethod
    def of(cls, raw: Mapping[str, Any], name: str, keys: Collection[str]) -> ConfigSection:
        """Pick section ``name`` out of the root mapping.

        Args:
            raw: Root configuration mapping.
            name: Section name.
            keys: Keys the section may contain.

        Raises:
            TypeError: If the section is not a mapping.
            ValueError: If the section contains unknown keys.
        """
        values = raw.get(name)
        if values is None:
            return cls(name, {})
        if not isinstance(values, Mapping):
            raise TypeError(f"{name} must be an object")
        unknown = sorted(str(key) for key in values if key not in keys)
        if unknown:
            raise ValueError(f"{name} has unknown keys: {unknown}")
        return cls(name, values)

    def key(self, field: str) -> str:
        return f"{self.name}.{field}"

    def flag(self, field: str, default: bool) -> bool:
        value = self.values.get(field, default)
        if not isinstance(value, bool):
            raise TypeError(f"{self.key(field)} must be a boolean")
        return value

    def text(self, field: str, default: str, *, non_empty: bool = True) -> str:
        value = self.values.get(field, default)
        if not isinstance(value, str):
            raise TypeError(f"{self.key(field)} must be a string")
        if non_empty and not value.strip():
            raise ValueError(f"{self.key(field)} must not be empty")
        return value

    def url(self, field: str, default: str) -> str:
        value = self.text(field, default)
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"{self.key(field)} must be an http(s) URL")
        return value

    def choice(
        self,
        field: str,
        default: str,
        allowed: Collection[str],
        *,
        fold: Optional[Callable[[str], str]] = None,
    ) -> str:
        """Read a string restricted to ``allowed``.

        Unquoted YAML numbers (``version: 1.2``) are read as their text.
        """
        value = self.values.get(field, default)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            raise TypeError(f"{self.key(field)} must be a string")
        if fold is not None:
            value = fold(value)
        if value not in allowed:
            raise ValueError(f"{self.key(field)} must be one of {sorted(allowed)}")
        return value

    def choices(
        self,
        field: str,
        default: Sequence[str],
        allowed: Collection[str],
    ) -> tuple[str, ...]:
        """Read a non-empty, case-insensitive list restricted to ``allowed``."""
        value = self.values.get(field, list(default))
        if not isinstance(value, list):
            raise TypeError(f"{self.key(field)} must be a list")
        items: list[str] = []
        for idx, item in enumerate(value):
            if not isinstance(item, str):
                raise TypeError(f"{self.key(field)}[{idx}] must be a string")
            items.append(item.lower())
        if not items:
            raise ValueError(f"{self.key(field)} must include at least one entry")
        unknown = sorted(set(items) - set(allowed))
        if unknown:
            raise ValueError(f"{self.key(field)} has unknown entries: {unknown}")
        return tuple(items)

    def integer(
        self,
        field: str,
        default: int,
        *,
        minimum: Optional[int] = None,
        maximum: Optional[int] = None,
    ) -> int:
        """Read an integer within ``[minimum, maximum]``; booleans are rejected."""
        value = self.values.get(field, default)
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{self.key(field)} must be an integer")
        self._check_bounds(field, value, minimum, maximum)
        return value

    def number(
        self,
        field: str,
        default: float,
        *,
        minimum: Optional[float] = None,
        positive: bool = False,
    ) -> float:
        """Read an int or float as float; booleans are rejected."""
        value = self.values.get(field, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{self.key(field)} must be a number")
        if positive and value <= 0:
            raise ValueError(f"{self.key(field)} must be > 0")
        self._check_bounds(field, value, minimum, None)
        return float(value)

    def _check_bounds(self, field: str, value: float, minimum: Optional[float], maximum: Optional[float]) -> None:
        if minimum is not None and maximum is not None and not minimum <= value <= maximum:
            raise ValueError(f"{self.key(field)} must be between {minimum} and {maximum}")
        if minimum is not None and value < minimum:
            raise ValueError(f"{self.key(field)} must be >= {minimum}")
        if maximum is not None and value > maximum:
            raise ValueError(f"{self.key(field)} must be <= {maximum}")
