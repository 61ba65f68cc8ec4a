"""City entity."""

from __future__ import annotations

from unitwork.orm import Entity, entity


@entity
class City(Entity):
    """A city people can live in."""

    name: str = ""
