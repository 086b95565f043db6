"""Single-statement INSERT ... ON CONFLICT DO UPDATE for the dialects the forum runs on."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def upsert(
    db: AsyncSession,
    model: type[Any],
    values: dict[str, Any],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
) -> None:
    """Insert `values`, or overwrite `update_columns` of the row already holding the key.

    Concurrent writers for the same key never fail on the unique constraint: the
    last statement to commit wins.
    """
    dialect = db.get_bind().dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"upsert() does not support the {dialect} dialect") from None

    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={column: stmt.excluded[column] for column in update_columns},
    )
    await db.execute(stmt)
