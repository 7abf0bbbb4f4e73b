#!/usr/bin/env python3
"""
Creates an admin account, or promotes an existing one.

    python create_admin.py --username admin --email admin@twitchviewer.com
    python create_admin.py --username admin --email admin@twitchviewer.com --seed

The password is prompted for unless --password is given.
"""

import argparse
import getpass
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from twitchviewer import create_app  # noqa: E402
from twitchviewer.auth.passwords import hash_password  # noqa: E402
from twitchviewer.seed import seed_default_content  # noqa: E402
from twitchviewer.storage import get_storage  # noqa: E402

logger = logging.getLogger(__name__)


def create_admin(storage, username, email, password):
    """Returns (user, created). An existing username or email is promoted instead."""
    user = storage.get_user_by_username(username) or storage.get_user_by_email(email)
    if user is not None:
        user = storage.update_user(user['id'], {'role': 'admin', 'email_verified': True})
        logger.info(f"Promoted existing user {user['id']} ({user['username']}) to admin")
        return user, False

    user = storage.create_user({
        'username': username,
        'email': email,
        'password': hash_password(password),
        'role': 'admin',
        'email_verified': True,
    })
    logger.info(f"Created admin user {user['id']} ({user['username']})")
    return user, True


def main(argv=None):
    parser = argparse.ArgumentParser(description='Create or promote a TwitchViewer admin user')
    parser.add_argument('--username', required=True, help='Admin username')
    parser.add_argument('--email', required=True, help='Admin email address')
    parser.add_argument('--password', help='Admin password (prompted when omitted)')
    parser.add_argument('--seed', action='store_true', help='Also seed the default site content')
    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        storage = get_storage()
        password = args.password
        if password is None and storage.get_user_by_username(args.username) is None:
            password = getpass.getpass('Password: ')
        if password is not None and len(password) < 6:
            print("Password must be at least 6 characters.")
            return 1

        user, created = create_admin(storage, args.username, args.email, password)
        print(f"{'Created' if created else 'Promoted'} admin: {user['username']} <{user['email']}>")

        if args.seed:
            count = seed_default_content(storage)
            print(f"Seeded {count} rows of default content.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
