from contextlib import contextmanager
import sqlite3
from sqlalchemy import event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from pos import db

# JSONB on PostgreSQL, plain JSON everywhere else
JSONType = db.JSON().with_variant(JSONB(), 'postgresql')

@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite only enforces ON DELETE CASCADE with this pragma set"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

@contextmanager
def commit_or_rollback(session=None):
    """Context manager committing the session, rolling back on error"""
    session = session or db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise

# Base model class
class BaseModel(db.Model):
    """Abstract base model with common fields"""
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())
    updated_at = db.Column(
        db.DateTime,
        default=db.func.current_timestamp(),
        onupdate=db.func.current_timestamp()
    )
