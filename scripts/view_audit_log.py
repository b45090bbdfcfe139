#!/usr/bin/env python3
"""
Utility script to view the WIMS audit trail kept in local storage.

Usage:
    python scripts/view_audit_log.py                       # Most recent entries
    python scripts/view_audit_log.py --limit 50            # Last 50 entries
    python scripts/view_audit_log.py --actor Admin         # Filter by actor
    python scripts/view_audit_log.py --action stock_out    # Filter by action type
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wims.config import get_config_manager
from wims.exceptions import StorageError
from wims.models import ActionType
from wims.storage import create_local_storage
from wims.utils import get_audit_logger


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="View the WIMS audit trail",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                         # View recent entries
  %(prog)s --limit 20              # View last 20 entries
  %(prog)s --actor "Sales User"    # Entries by one user
  %(prog)s --action order_approved # Entries of one type
        """
    )
    parser.add_argument('--limit', type=int, default=100, metavar='N', help='Show at most N entries')
    parser.add_argument('--actor', help='Only entries performed by ACTOR')
    parser.add_argument(
        '--action',
        choices=[action.value for action in ActionType],
        help='Only entries of this action type'
    )
    args = parser.parse_args()

    config = get_config_manager()
    storage_path = config.get("storage.path", "data/wims_storage.json")
    encryption_key = config.get_storage_encryption_key() if config.get("storage.encrypted", False) else None

    if not Path(storage_path).exists():
        print(f"Error: storage not found at {storage_path}", file=sys.stderr)
        sys.exit(1)

    try:
        storage = create_local_storage(storage_path, encryption_key)
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    audit_logger = get_audit_logger(storage)
    if args.actor:
        logs = audit_logger.get_logs_by_actor(args.actor, args.limit)
    elif args.action:
        logs = audit_logger.get_logs_by_action_type(ActionType(args.action), args.limit)
    else:
        logs = audit_logger.get_recent_logs(args.limit)

    for log in logs:
        print(log.to_readable_string())


if __name__ == '__main__':
    main()
