"""Script to run the scheduling schema migrations."""

import sys

from alembic import command
from alembic.config import Config

USAGE = "Usage: python scripts/migrate.py [upgrade [rev] | downgrade <rev> | current]"


def _config() -> Config:
    return Config("alembic.ini")


def upgrade(revision: str = "head") -> None:
    """Upgrade the schema, to the latest revision by default."""
    try:
        print(f"Upgrading schema to {revision}...")
        command.upgrade(_config(), revision)
        print("✓ Migrations completed successfully!")
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        sys.exit(1)


def downgrade(revision: str) -> None:
    """Revert the schema to ``revision``."""
    try:
        print(f"Downgrading schema to {revision}...")
        command.downgrade(_config(), revision)
        print("✓ Downgrade completed successfully!")
    except Exception as e:
        print(f"✗ Downgrade failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    args = sys.argv[1:]
    if not args or args[0] == "upgrade":
        upgrade(args[1] if len(args) > 1 else "head")
    elif args[0] == "downgrade" and len(args) > 1:
        downgrade(args[1])
    elif args[0] == "current":
        command.current(_config(), verbose=True)
    else:
        print(USAGE)
