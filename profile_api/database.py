"""Database connection and session management."""
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import CreateColumn

from profile_api.config import settings
from profile_api.logging_config import get_logger
from profile_api.models import AppUser, Base
from profile_api.services.user_store import ColumnCache

logger = get_logger(__name__)


def normalize_database_url(url: str) -> str:
    """Point bare postgres URLs at the psycopg 3 driver.

    Railway/Heroku hand out postgres://, which SQLAlchemy no longer accepts, and a
    bare postgresql:// would select psycopg2.
    """
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


database_url = normalize_database_url(settings.database_url)

engine = create_engine(
    database_url,
    connect_args={"check_same_thread": False} if "sqlite" in database_url else {},
    poolclass=StaticPool if "sqlite" in database_url else None,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Process-lifetime knowledge of which users columns exist.
user_columns = ColumnCache(settings.users_table)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def migrate_user_columns(bind: Engine = engine, cache: ColumnCache = user_columns) -> list[str]:
    """Add optional AppUser columns missing from the live users table.

    Returns the names of the columns that were added.
    """
    table_name = AppUser.__table__.name
    existing = {c["name"] for c in inspect(bind).get_columns(table_name)}
    added = []
    with bind.begin() as conn:
        for col in AppUser.__table__.columns:
            if col.name in existing or col.primary_key:
                continue
            ddl = CreateColumn(col).compile(dialect=bind.dialect)
            conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {ddl}"))
            # ADD COLUMN carries no UNIQUE; the model's indexes enforce it.
            for index in AppUser.__table__.indexes:
                if col.name in index.columns:
                    index.create(conn, checkfirst=True)
            added.append(col.name)
    if added:
        logger.info("Added columns to %s: %s", table_name, ", ".join(added))
    cache.invalidate()
    return added


def init_db(bind: Engine = engine) -> None:
    """Create the users table when missing, optionally migrating an existing one."""
    Base.metadata.create_all(bind=bind)
    if settings.auto_migrate:
        migrate_user_columns(bind)
