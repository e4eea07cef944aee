# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Alembic environment – runs migrations against the database named by
DATABASE_URL, read through the application's Settings class so there is a
single source of truth for the connection string.

    alembic -c alembic.ini upgrade head
"""

import os
import sys

# backend/ must be importable for ``core.config`` and the model modules
_BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from alembic import context  # noqa: E402

from core.config import settings  # noqa: E402
from database import Base, build_engine  # noqa: E402

# Every model module must be imported so Base.metadata sees its table;
# ``alembic revision --autogenerate`` relies on it.
import models.user          # noqa: F401, E402
import models.announcement  # noqa: F401, E402
import models.audit_log     # noqa: F401, E402


def run_migrations_online():
    """Default mode – apply migrations over a live connection."""
    connectable = build_engine(settings.database_url)
    with connectable.connect() as conn:
        context.configure(
            connection=conn,
            target_metadata=Base.metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


def run_migrations_offline():
    """``--sql`` mode – emit the DDL without connecting."""
    context.configure(
        url=settings.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
