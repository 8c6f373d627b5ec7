from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy  # type: ignore[import]

from db_utils import connection as sa_connection, transactional_connection

db = SQLAlchemy()


@contextmanager
def db_transaction():
    """Context manager yielding a transactional DB connection."""
    with transactional_connection(db.engine) as conn:
        yield conn


def db_connection():
    """Plain (autocommit-free) connection for read-only queries."""
    return sa_connection(db.engine)
