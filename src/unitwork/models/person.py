"""Person entity."""

from __future__ import annotations

from typing import Any

from unitwork.core.errors import ConfigurationError
from unitwork.models.city import City
from unitwork.orm import Entity, entity


@entity
class Person(Entity):
    """A person, optionally living in a :class:`City` (stored as ``CityId``).

    ``age`` is checked on every assignment, including the one made by the
    generated ``__init__``.
    """

    name: str = ""
    surname: str = ""
    passport_number: str | None = None
    age: int = 0
    city: City | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "age" and value is not None and value < 0:
            raise ConfigurationError("age cannot be negative").with_context(entity_type="Person", age=value)
        super().__setattr__(name, value)

    def __str__(self) -> str:
        city_id = self.city.id if self.city is not None else None
        return f"Name {self.name}, Surname {self.surname}, Age {self.age}, City {city_id}"
