"""Demo module for seeding a wallet with sample accounts and products"""

from .seed_loader import seed_demo_data, DemoSeeder

__all__ = ['seed_demo_data', 'DemoSeeder']
