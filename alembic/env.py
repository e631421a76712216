from alembic import context
from app.core.config import settings
from app.db.session import Base, make_engine
from app.db import models  # noqa

# Logging is configured by the application, not alembic.ini
config = context.config
target_metadata = Base.metadata
is_sqlite = settings.database_url.startswith("sqlite")

def run_migrations_offline():
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=is_sqlite,
    )
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    connectable = make_engine(settings.database_url)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=is_sqlite)
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
