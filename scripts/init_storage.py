#!/usr/bin/env python3
"""
Storage initialization script.

Creates the WIMS local storage file and seeds inventory from the product
catalog.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wims.config import get_config_manager
from wims.models import DEFAULT_CATALOG, InventoryItem
from wims.services import InventoryService
from wims.storage import create_local_storage, create_store
from wims.utils import generate_encryption_key, get_logger


def main() -> None:
    """Initialize local storage."""
    parser = argparse.ArgumentParser(description="Create and seed WIMS local storage")
    parser.add_argument("--encrypt", action="store_true", help="Encrypt the storage file")
    parser.add_argument("--stock", type=int, default=100, help="Opening stock per catalog item (cases)")
    parser.add_argument("--min-stock", type=int, default=20)
    parser.add_argument("--max-stock", type=int, default=500)
    parser.add_argument("--location", default="Main Warehouse")
    args = parser.parse_args()

    logger = get_logger("init_storage")

    logger.info("=" * 60)
    logger.info("WIMS Storage Initialization")
    logger.info("=" * 60)

    config = get_config_manager()
    storage_path = config.get("storage.path", "data/wims_storage.json")

    if Path(storage_path).exists():
        logger.error(f"Storage already exists at {storage_path}; remove it first to re-initialize")
        sys.exit(1)

    encryption_key = None
    if args.encrypt:
        encryption_key = config.get_storage_encryption_key()
        if encryption_key is None:
            encryption_key = generate_encryption_key()
            config.set_storage_encryption_key(encryption_key)
            logger.info("Encryption key generated and stored securely")
        config.set("storage.encrypted", True)

    logger.info(f"Creating storage at: {storage_path}")
    logger.info(f"Encryption: {'ENABLED' if encryption_key else 'DISABLED'}")

    storage = create_local_storage(storage_path, encryption_key)
    store = create_store(storage)
    inventory_service = InventoryService(store)

    for product in DEFAULT_CATALOG:
        inventory_service.add_item(InventoryItem(
            id=product.id,
            name=product.name,
            category=product.category,
            volume=product.volume,
            bottles_per_case=product.bottles_per_case,
            current_stock=args.stock,
            min_stock=args.min_stock,
            max_stock=args.max_stock,
            reorder_point=args.min_stock,
            location=args.location,
        ))
        logger.info(f"  + {product.name}")

    summary = inventory_service.get_inventory_summary()
    logger.info(f"Seeded {len(DEFAULT_CATALOG)} items, {summary['total_items']} cases in stock")
    logger.info("=" * 60)
    logger.info("Storage initialization complete!")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
