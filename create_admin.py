"""
Bootstrap user accounts
- gives users without a password one (the part of their e-mail before the @)
- creates an administrator when no ADMIN user exists yet

Usage: python create_admin.py [--email EMAIL] [--name NAME] [--password PASSWORD]
"""

import argparse
import logging
import os
import secrets
import sys
from typing import Optional

from resident_portal.config import DATA_DIR
from resident_portal.domain.users.repository import UserRepository
from resident_portal.json_store import JsonStore, StorageError
from resident_portal.security_utils import hash_password, mask_email
from resident_portal.shared.dates import utc_now_iso

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@residentportal.local"
DEFAULT_ADMIN_NAME = "Administrator"


def set_missing_passwords(store: JsonStore) -> int:
    """Hash a default password for every user that has none"""
    users = UserRepository(store)
    with store.lock(users.collection):
        records = users.all()
        updated = 0
        for user in records:
            if user.get("password") or not user.get("email"):
                continue
            user["password"] = hash_password(user["email"].split("@")[0])
            updated += 1
            logger.info(f"🔑 Default password set for {mask_email(user['email'])}")
        if updated:
            users.save_all(records)
    return updated


def ensure_admin(store: JsonStore, email: str, name: str, password: str) -> Optional[dict]:
    """Create the administrator account, None when an ADMIN already exists"""
    users = UserRepository(store)
    if users.has_role("ADMIN"):
        logger.info("ℹ️ An ADMIN user already exists, nothing to do")
        return None

    if users.get_by_email(email):
        logger.error(f"❌ {mask_email(email)} is already used by a non-admin account")
        raise ValueError(f"Email {email} is already in use")

    now = utc_now_iso()
    admin = {
        "id": users.new_id(),
        "email": email.strip().lower(),
        "password": hash_password(password),
        "name": name,
        "role": "ADMIN",
        "createdAt": now,
        "updatedAt": now,
    }
    users.add(admin)
    logger.info(f"✅ Admin user created: {admin['email']}")
    return admin


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--data-dir", default=DATA_DIR)
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL))
    parser.add_argument("--name", default=DEFAULT_ADMIN_NAME)
    parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))
    args = parser.parse_args(argv)

    store = JsonStore(args.data_dir, mode="file")
    generated = args.password is None
    password = args.password or secrets.token_urlsafe(12)

    try:
        updated = set_missing_passwords(store)
        if updated:
            logger.info(f"✅ Added passwords for {updated} users")
        admin = ensure_admin(store, args.email, args.name, password)
    except (StorageError, ValueError) as e:
        logger.error(f"❌ Bootstrap failed: {e}")
        return 1

    if admin and generated:
        logger.info(f"🔐 Generated admin password (shown once): {password}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
