"""Single-statement insert-or-update for the supported database dialects."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from wallet_gate.db.session import Base

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert(
    db: Session,
    model: type[Base],
    values: Mapping[str, Any],
    *,
    key: Sequence[str],
) -> None:
    """Insert `values` into `model`'s table, overwriting the row that shares `key`.

    Issues ``INSERT ... ON CONFLICT (key) DO UPDATE`` so concurrent writers
    never fail on the unique key; the last write wins. The caller commits.
    """
    dialect = db.get_bind().dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError as err:
        raise NotImplementedError(f"upsert is not supported on {dialect}") from err

    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(key),
        set_={name: stmt.excluded[name] for name in values if name not in key},
    )
    db.execute(stmt)

    # An instance already loaded for this key no longer matches the row.
    identity = tuple(values[name] for name in key)
    instance = db.identity_map.get(db.identity_key(model, identity))
    if instance is not None:
        db.expire(instance)
