# ==============================================================================
# BASE MODEL - Declarative Base for Repository Entities
# ==============================================================================
# Entities handed out by repositories outlive the unit of work that loaded
# them; serialization must never reach back into a closed session
# ==============================================================================

from __future__ import annotations

from typing import Any
from uuid import uuid4

from sqlalchemy import String, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class SQLBase(DeclarativeBase):
    """
    Base class for entities managed through BaseRepository.

    Provides a UUID string primary key and a session-free snapshot of
    column values. Once a unit of work commits its session is closed, so
    lazy loads from an entity raise; to_dict only reads what is already
    loaded.

    Example:
        >>> class User(SQLBase):
        ...     __tablename__ = "users"
        ...     email: Mapped[str] = mapped_column(String(255))
    """

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    def to_dict(self) -> dict[str, Any]:
        """
        Snapshot loaded column values.

        Expired or deferred columns (server defaults after a flush
        without refresh, for instance) are left out rather than loaded.

        Returns:
            Mapping of column name to value
        """
        state = inspect(self)
        unloaded = state.unloaded
        return {
            attr.key: getattr(self, attr.key)
            for attr in state.mapper.column_attrs
            if attr.key not in unloaded
        }

    def __repr__(self) -> str:
        state = inspect(self)
        if state.pending:
            status = "pending"
        elif state.deleted or state.was_deleted:
            status = "deleted"
        elif state.detached:
            status = "detached"
        elif state.persistent:
            status = "persistent"
        else:
            status = "transient"
        return f"<{self.__class__.__name__}(id={state.dict.get('id')!r}, {status})>"
