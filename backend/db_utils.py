from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Mapping, Optional, Sequence, Tuple, cast

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine, Result

# Timestamps are bound as text so the same statements run on SQLite and PostgreSQL.
DB_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _prepare_statement(
    sql: str, params: Sequence[object] | Mapping[str, object] | None
) -> Tuple[str, dict]:
    """Rewrite qmark placeholders into named binds understood by ``text()``."""
    if params is None:
        return sql, {}
    if isinstance(params, Mapping):
        return sql, dict(params)
    if not isinstance(params, Sequence):
        raise TypeError("Unsupported parameter type; expected sequence or mapping.")

    parts = sql.split("?")
    if len(parts) - 1 != len(params):
        raise ValueError(
            f"Parameter count mismatch: expected {len(parts) - 1}, got {len(params)}."
        )

    bound_params: dict[str, object] = {}
    rebuilt = parts[0]
    for index, (part, value) in enumerate(zip(parts[1:], params)):
        key = f"p{index}"
        rebuilt += f":{key}{part}"
        bound_params[key] = value
    return rebuilt, bound_params


def to_db_timestamp(value: datetime) -> str:
    return value.strftime(DB_TIMESTAMP_FORMAT)


def from_db_timestamp(value: object) -> datetime:
    # PostgreSQL hands back datetime objects, SQLite hands back the stored text.
    if isinstance(value, datetime):
        return value.replace(microsecond=0)
    return datetime.fromisoformat(str(value)).replace(microsecond=0)


class ResultWrapper:
    def __init__(self, result: Result):
        self._result = result

    def fetchone(self) -> Optional[Mapping[str, object]]:
        row = self._result.fetchone()
        return None if row is None else cast(Mapping[str, object], row._mapping)

    def fetchall(self) -> list[Mapping[str, object]]:
        return [
            cast(Mapping[str, object], row._mapping) for row in self._result.fetchall()
        ]

    def scalar(self):
        return self._result.scalar()

    @property
    def rowcount(self) -> int:
        raw = getattr(self._result, "rowcount", None)
        return int(raw or 0)


class SQLAlchemyConnectionWrapper:
    def __init__(self, connection: Connection):
        self._connection = connection

    def execute(
        self,
        sql: str,
        params: Sequence[object] | Mapping[str, object] | None = None,
    ) -> ResultWrapper:
        statement, bound_params = _prepare_statement(sql, params)
        result = self._connection.execute(text(statement), bound_params)
        return ResultWrapper(result)

    def close(self) -> None:
        self._connection.close()


@contextmanager
def transactional_connection(engine: Engine) -> Iterator[SQLAlchemyConnectionWrapper]:
    connection = engine.connect()
    transaction = connection.begin()
    wrapper = SQLAlchemyConnectionWrapper(connection)
    try:
        yield wrapper
    except Exception:
        transaction.rollback()
        connection.close()
        raise
    else:
        transaction.commit()
        connection.close()


def connection(engine: Engine) -> SQLAlchemyConnectionWrapper:
    return SQLAlchemyConnectionWrapper(engine.connect())
