"""Change-tracking unit of work.

The unit of work keeps two parallel lists, one :class:`TrackedEntity`
record and one snapshot per tracked ``(type, id)`` pair, always the same
length and in the same order.  At commit time it diffs every live entity
against its snapshot, renders the pending changes into one batch with
:class:`~unitwork.orm.command.CommandBuilder` and executes that batch as a
single non-query call.

Architecture:
    ::

        register / add / delete / get_entities
                     │
                     ▼
        ┌──────────────────────────┐    ┌──────────────────────────┐
        │ _tracked: [TrackedEntity]│ ←→ │ _snapshots: [Entity]     │
        └──────────────────────────┘    └──────────────────────────┘
                     │ commit()
                     ▼
        _detect_changes()   CLEAN → UPDATE, dirty field names collected
                     │
                     ▼
        sort pending by index (0 first, then caller's add/delete order)
                     │
                     ▼
        CommandBuilder → SqlCommand → connection.execute_non_query()
                     │ success
                     ▼
        snapshots refreshed, dirty sets cleared, states CLEAN, deletes untracked

Ordering:
    ``add(A); delete(B); add(C)`` renders INSERT A, DELETE B, INSERT C.
    Entities that only became dirty through field comparison carry index 0
    and come first, in tracking order.

Reads:
    :meth:`UnitOfWork.get_entities` lets a fresh read win: an already
    tracked instance is overwritten in place with the values just read,
    its snapshot is replaced and its state returns to CLEAN, discarding
    unsaved local edits to the columns that were read.

Not safe for concurrent use; one unit of work serves one caller.

Tags:
    unitwork, orm, unit-of-work, change-tracking, commit-ordering
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from unitwork.core.errors import ConfigurationError, InvariantViolationError
from unitwork.core.logging import get_logger
from unitwork.core.protocols import AsyncConnection, opened
from unitwork.orm.command import CommandBuilder
from unitwork.orm.entity import Entity
from unitwork.orm.metadata import ID_COLUMN, EntityRegistry, default_registry
from unitwork.orm.repository import Repository
from unitwork.orm.state import EntityState, TrackedEntity

logger = get_logger(__name__)

E = TypeVar("E", bound=Entity)


def _key(entity: Entity) -> tuple[type, Any]:
    return type(entity), entity.id


class UnitOfWork:
    """Tracks entities, detects their changes and commits them in one batch."""

    def __init__(
        self,
        connection: AsyncConnection,
        repository: Repository | None = None,
        metadata: EntityRegistry | None = None,
    ) -> None:
        if connection is None:
            raise ConfigurationError("connection cannot be None")
        self.connection = connection
        self._metadata = metadata or default_registry
        self.repository = repository or Repository(connection, self._metadata)

        self._tracked: list[TrackedEntity] = []
        self._snapshots: list[Entity] = []
        self._positions: dict[tuple[type, Any], int] = {}

    # -- Inspection --------------------------------------------------------

    def get(self, entity: Entity) -> TrackedEntity | None:
        """Tracked record for *entity* (matched by identity), or ``None``."""
        position = self._positions.get(_key(entity))
        return None if position is None else self._tracked[position]

    def __contains__(self, entity: object) -> bool:
        return isinstance(entity, Entity) and _key(entity) in self._positions

    def __len__(self) -> int:
        return len(self._tracked)

    # -- Registration ------------------------------------------------------

    def register(self, entity: Entity) -> None:
        """Start tracking *entity* (state CLEAN). No-op if already tracked."""
        self._register(entity)

    def register_all(self, entities: Iterable[Entity]) -> None:
        if entities is None:
            raise ConfigurationError("entities cannot be None")
        for entity in entities:
            self.register(entity)

    def add(self, entity: Entity) -> None:
        """Schedule *entity* for INSERT, ordered after earlier add/delete calls."""
        self._mark(entity, EntityState.ADD)

    def add_all(self, entities: Iterable[Entity]) -> None:
        if entities is None:
            raise ConfigurationError("entities cannot be None")
        for entity in entities:
            self.add(entity)

    def delete(self, entity: Entity) -> None:
        """Schedule *entity* for DELETE, ordered after earlier add/delete calls."""
        self._mark(entity, EntityState.DELETE)

    def _register(self, entity: Entity) -> TrackedEntity:
        if entity is None:
            raise ConfigurationError("entity cannot be None")
        if not isinstance(entity, Entity):
            raise ConfigurationError(f"{type(entity).__name__} is not an Entity")

        key = _key(entity)
        position = self._positions.get(key)
        if position is not None:
            return self._tracked[position]

        self._metadata.describe(type(entity))
        tracked = TrackedEntity(entity)
        self._positions[key] = len(self._tracked)
        self._tracked.append(tracked)
        self._snapshots.append(entity.shallow_clone())
        logger.debug("entity_registered", table=type(entity).__name__, entity_id=str(entity.id))
        return tracked

    def _mark(self, entity: Entity, state: EntityState) -> None:
        tracked = self._register(entity)
        tracked.state = state
        tracked.index = max((t.index for t in self._tracked), default=0) + 1

    # -- Reads -------------------------------------------------------------

    async def get_entities(self, entity_type: type[E], columns: Iterable[str] | None = None) -> list[E]:
        """Read *entity_type* and reconcile the rows with tracked entities.

        Returns the tracked instances, never the raw objects the repository
        built, so callers always hold the object the unit of work tracks.
        """
        descriptor = self._metadata.describe(entity_type)
        requested = None if columns is None else descriptor.resolve_columns([*columns, ID_COLUMN])

        rows = await self.repository.read(entity_type, requested)

        read_fields = [
            descriptor.field_for_column(column)
            for column in (requested or descriptor.columns)
            if column != ID_COLUMN
        ]
        result: list[E] = []
        for row in rows:
            position = self._positions.get(_key(row))
            if position is None:
                self._register(row)
                result.append(row)
                continue

            tracked = self._tracked[position]
            live = tracked.entity
            if tracked.state is not EntityState.CLEAN:
                logger.info(
                    "local_changes_discarded",
                    table=descriptor.table,
                    entity_id=str(live.id),
                    state=tracked.state.value,
                )
            for f in read_fields:
                fresh = f.get(row)
                if f.is_reference and fresh is not None and fresh == f.get(live):
                    continue
                f.set(live, fresh)
            self._snapshots[position] = live.shallow_clone()
            tracked.reset()
            result.append(live)
        return result

    # -- Commit ------------------------------------------------------------

    async def commit(self) -> int:
        """Persist every pending change in one batch; returns affected rows.

        Nothing pending means no statement and no connection: returns 0.
        On failure snapshots and dirty sets are left untouched, so calling
        commit again re-diffs from the pre-commit state.
        """
        self._detect_changes()

        builder = CommandBuilder(metadata=self._metadata)
        pending = sorted(
            (t for t in self._tracked if t.state is not EntityState.CLEAN),
            key=lambda t: t.index,
        )
        for tracked in pending:
            entity = tracked.entity
            match tracked.state:
                case EntityState.UPDATE:
                    builder.append_update(tracked)
                case EntityState.DELETE:
                    builder.append_delete(entity.id, self._metadata.describe(type(entity)).table)
                case EntityState.ADD:
                    builder.append_insert(entity)
                case _:
                    raise InvariantViolationError(
                        f"Not implemented state {tracked.state!r}"
                    ).with_context(entity_type=type(entity).__name__, entity_id=str(entity.id), operation="commit")

        command = builder.command
        logger.debug("commit_rendered", sql=command.text, parameters=len(command.parameters))
        if not command.text:
            return 0

        async with opened(self.connection) as conn:
            rows_affected = await conn.execute_non_query(command)

        self._clear()
        logger.info("commit_completed", statements=len(command.statements), rows_affected=rows_affected)
        return rows_affected

    def _clear(self) -> None:
        """Drop committed deletes, refresh snapshots and reset every record."""
        self._tracked = [t for t in self._tracked if t.state is not EntityState.DELETE]
        self._snapshots = [t.entity.shallow_clone() for t in self._tracked]
        self._positions = {_key(t.entity): i for i, t in enumerate(self._tracked)}
        for tracked in self._tracked:
            tracked.reset()

    def _detect_changes(self) -> None:
        if len(self._tracked) != len(self._snapshots):
            raise InvariantViolationError(
                f"snapshots length is {len(self._snapshots)} and tracked length is "
                f"{len(self._tracked)}, but these should be equal"
            ).with_context(operation="detect_changes")

        for tracked, snapshot in zip(self._tracked, self._snapshots):
            if tracked.is_explicit:
                continue
            entity = tracked.entity
            for f in self._metadata.describe(type(entity)).persistable_fields:
                if f.get(entity) != f.get(snapshot):
                    tracked.state = EntityState.UPDATE
                    tracked.changed_fields.add(f.name)


__all__ = ["UnitOfWork"]
