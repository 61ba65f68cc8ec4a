"""Sample entity types: :class:`City` and :class:`Person`."""

from unitwork.models.city import City
from unitwork.models.person import Person

__all__ = ["City", "Person"]
