"""Alembic environment for the portal schema (users, events, event_participants)."""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from portal.config import settings
from portal.database import Base
from portal.models.user import User                      # noqa: F401
from portal.models.event import Event                    # noqa: F401
from portal.models.participant import EventParticipant   # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# SQLite cannot ALTER constraints in place; batch mode recreates the table.
BATCH_MODE = settings.DATABASE_URL.startswith("sqlite")


def _migrate(**configure_kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=BATCH_MODE,
        **configure_kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    # `alembic upgrade --sql` emits the DDL instead of connecting.
    _migrate(url=settings.DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        _migrate(connection=connection)
