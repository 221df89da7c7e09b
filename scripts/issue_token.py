#!/usr/bin/env python3
"""
Issue a bearer token for a caller identity.

Usage:
    python scripts/issue_token.py chef_anna
    python scripts/issue_token.py chef_anna --expires 60
    python scripts/issue_token.py kiosk --expires 0      # no expiry
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pantry.api.auth import create_access_token
from pantry.config import get_config_manager


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Issue a Pantry API bearer token")
    parser.add_argument('user_id', help='Caller identity recorded on items and audit entries')
    parser.add_argument(
        '--expires',
        type=int,
        metavar='MINUTES',
        help='Token lifetime in minutes (default: auth.token_expire_minutes, 0 for none)'
    )
    args = parser.parse_args()

    if not args.user_id.strip():
        print("Error: user_id must not be empty", file=sys.stderr)
        sys.exit(1)

    token = create_access_token(args.user_id, args.expires, get_config_manager())
    print(token)


if __name__ == "__main__":
    main()
