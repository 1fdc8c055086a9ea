"""Create a user account.

Registration is not exposed over HTTP; accounts are provisioned here.

Usage:
    python scripts/create_user.py alice@example.com
    (the password is read from the prompt, or from FILES_MANAGER_PASSWORD)
"""

import argparse
import getpass
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from files_manager.core.config import settings
from files_manager.database import create_db_engine, create_session_factory, init_schema
from files_manager.exceptions import ValidationError
from files_manager.services.auth_service import create_user


def main():
    parser = argparse.ArgumentParser(description="Create a files manager user")
    parser.add_argument("email", help="Login email address")
    args = parser.parse_args()

    password = os.environ.get("FILES_MANAGER_PASSWORD") or getpass.getpass("Password: ")

    engine = create_db_engine(settings.database_url, settings)
    init_schema(engine)
    db = create_session_factory(engine)()
    try:
        user = create_user(db, args.email, password)
    except ValidationError as e:
        print(f"✗ {e.message}")
        sys.exit(1)
    finally:
        db.close()
        engine.dispose()

    print(f"✓ Created user {user.email} ({user.user_id})")


if __name__ == "__main__":
    main()
