#!/usr/bin/env python3
"""
View the Pantry audit trail.

Usage:
    python scripts/view_audit_log.py                       # Most recent entries
    python scripts/view_audit_log.py --item <item-id>      # One item, oldest first
    python scripts/view_audit_log.py --actor chef_anna     # Entries by one caller
    python scripts/view_audit_log.py --tail 20 --grep "Cheese"
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pantry.config import get_config_manager
from pantry.database import create_database_manager
from pantry.exceptions import PantryError
from pantry.services import AuditStore
from pantry.models import validate_item_id


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="View the Pantry audit trail",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              # Latest 50 entries, all items
  %(prog)s --item 3f0b9c1e-...          # Replay one item's history
  %(prog)s --actor seed_script          # Everything the seed script did
  %(prog)s --tail 100 --grep "Delete"   # Combine filters
        """
    )
    parser.add_argument('--item', metavar='ITEM_ID', help='Show the full history of one item')
    parser.add_argument('--actor', metavar='USER_ID', help='Show entries by one caller')
    parser.add_argument(
        '--tail',
        type=int,
        default=50,
        metavar='N',
        help='Number of recent entries to show (default: 50)'
    )
    parser.add_argument('--grep', metavar='PATTERN', help='Filter lines containing PATTERN')
    parser.add_argument('--db', help='Database path (default: database.path setting)')
    args = parser.parse_args()

    config = get_config_manager()
    db_manager = create_database_manager(
        args.db or config.get("database.path", "data/pantry.db"),
        config.get("database.timeout_seconds", 5.0),
    )
    audit_store = AuditStore(db_manager, max_limit=config.get("audit.max_limit", 500))

    try:
        if args.item:
            entries = audit_store.replay(validate_item_id(args.item))
        elif args.actor:
            entries = list(reversed(audit_store.get_by_actor(args.actor, limit=args.tail)))
        else:
            entries = list(reversed(audit_store.get_recent(limit=args.tail)))
    except PantryError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    lines = [entry.to_readable_string() for entry in entries]
    if args.grep:
        lines = [line for line in lines if args.grep in line]

    for line in lines:
        print(line)


if __name__ == "__main__":
    main()
