#!/usr/bin/env python3
"""
Run the update vs. upsert demo once against the configured MongoDB.

Reads MONGO_URL / DB_NAME / COLLECTION / MAX_POOL_SIZE from the environment
(or .env) and prints the report as JSON.

Usage:
    python scripts/run_demo.py

    # Start from an empty collection, load the samples first
    python scripts/run_demo.py --clear --sample

    # Use a fixed "missing" contact (step B matches on the second run)
    python scripts/run_demo.py --missing-email missing@example.com
"""

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Run the update vs. upsert demo")
    parser.add_argument("--missing-email", help="Email used for the missing-contact steps")
    parser.add_argument("--clear", action="store_true", help="Delete all contacts first")
    parser.add_argument("--sample", action="store_true", help="Insert the sample contacts first")
    args = parser.parse_args()

    from contact_store import (
        ContactStoreError,
        StoreConfig,
        get_contact_gateway,
        insert_sample_contacts,
        reset_contact_gateway,
        run_update_upsert_demo,
    )

    config = StoreConfig.from_env()
    logger.info(f"Using {config.database}.{config.collection}")
    gateway = get_contact_gateway(config)

    try:
        if args.clear:
            gateway.delete_all()
            logger.info("  ✓ Cleared contacts")
        if args.sample:
            sample = insert_sample_contacts(gateway)
            logger.info(f"  ✓ Sample contacts: {sample['bulk']['upserts']} new, {sample['total']} total")

        report = run_update_upsert_demo(gateway, missing_email=args.missing_email)
    except ContactStoreError as e:
        logger.error(f"\n❌ Demo failed: {e}")
        sys.exit(1)
    finally:
        reset_contact_gateway()

    print(json.dumps(report.to_dict(), indent=2, default=str))


if __name__ == "__main__":
    main()
