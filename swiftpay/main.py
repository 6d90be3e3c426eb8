"""Main entry point for the wallet demo"""

from pathlib import Path
from dotenv import load_dotenv

# Load environment variables FIRST, before any other imports
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

from swiftpay.demo import seed_demo_data
from swiftpay.service import WalletService
from swiftpay.utils.logging import get_logger

logger = get_logger(__name__)


def main():
    """Seed demo data into the configured store and log the admin overview"""
    logger.info("=" * 60)
    logger.info("SWIFTPAY - Wallet Ledger Demo")
    logger.info("=" * 60)

    try:
        service = WalletService.from_config()
        seeded = seed_demo_data(service)

        directory = service.directory
        stats = directory.overview()
        mismatches = directory.reconcile_balances()

        logger.info("=" * 60)
        logger.info("LEDGER SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Accounts seeded: {seeded['accounts']}")
        logger.info(f"Products seeded: {seeded['products']}")
        logger.info(f"Total users: {stats['total_users']}")
        logger.info(f"Total transactions: {stats['total_transactions']}")
        logger.info(f"Transaction volume: {stats['total_volume']}")
        logger.info(f"Pending vendor verifications: {stats['pending_vendors']}")
        logger.info(f"Balance mismatches: {len(mismatches)}")
        logger.info("=" * 60)

        return stats

    except Exception as e:
        logger.error(f"Main execution failed: {e}")
        raise


if __name__ == "__main__":
    main()
