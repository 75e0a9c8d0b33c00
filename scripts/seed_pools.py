"""
Seed the pools, teams and pool_matches tables from data/pools.json.
"""
import logging

from survivor.database import create_db_and_tables, engine
from survivor.seed import seed_pools


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("Creating database tables...")
    create_db_and_tables()

    print("Seeding pools from data/pools.json...")
    count = seed_pools(engine)
    print(f"Done! {count} pools seeded.")


if __name__ == "__main__":
    main()
