# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first administrator.

Run once after the initial migration:
    python bin/seed_admin.py

Reads FIRST_ADMIN_EMAIL, FIRST_ADMIN_PASSWORD and FIRST_ADMIN_NAME from
etc/app.conf (or the environment).  Running it again is harmless: an
existing account with that email is left untouched.
"""

import os
import sys

# bin/seed_admin.py  →  ../backend
_BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend"))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from core.config import settings              # noqa: E402
from core.errors import PortalError           # noqa: E402
from core.logger import logger                # noqa: E402
from core.passwords import PasswordHasher     # noqa: E402
from database import SessionLocal             # noqa: E402
from auth.store import CredentialStore        # noqa: E402


def seed() -> int:
    if not settings.first_admin_email or not settings.first_admin_password:
        logger.warning("FIRST_ADMIN_EMAIL or FIRST_ADMIN_PASSWORD not set – nothing to do")
        return 0

    db = SessionLocal()
    try:
        store = CredentialStore(
            db,
            PasswordHasher.from_settings(settings),
            password_min_length=settings.password_min_length,
        )
        try:
            admin = store.seed_admin(
                settings.first_admin_email,
                settings.first_admin_password,
                full_name=settings.first_admin_name,
            )
        except PortalError as exc:
            logger.error("Admin seeding failed: %s", exc.message)
            return 1

        if admin is None:
            logger.info("Admin '%s' already exists – skipping", settings.first_admin_email)
        else:
            logger.info("Admin '%s' created with id %s", admin.email, admin.id)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(seed())
