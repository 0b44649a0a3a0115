#!/usr/bin/env python3
"""
Index lookup benchmark

Seeds the products table and times a single-row lookup by product_name
(no index) against a lookup by serial_number (unique index).

Usage:
    indexbench migrate
    indexbench seed --count 100000 --reset
    indexbench bench --repeats 5
    indexbench run --count 100000 --repeats 5
    indexbench explain --value 3f1c...

The database comes from DATABASE_URL (or .env), or --database-url.
"""

import argparse
import logging
import sys
from typing import List, Optional

from indexbench.config import settings
from indexbench.db.database import init_db, make_engine, session_factory
from indexbench.repositories.product_repository import ProductRepository, LOOKUP_COLUMNS
from indexbench.schemas.product import BenchmarkReport
from indexbench.services.benchmark_service import BenchmarkService
from indexbench.services.seed_service import SeedService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="indexbench",
        description="Compare lookups on an indexed and a non-indexed column"
    )
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    parser.add_argument(
        "--no-migrations",
        dest="use_migrations",
        action="store_false",
        default=settings.run_migrations,
        help="Create the schema from model metadata instead of running Alembic"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Create or upgrade the schema")

    seed = subparsers.add_parser("seed", help="Insert generated products")
    seed.add_argument("--count", type=int, default=settings.number_of_records)
    seed.add_argument("--batch-size", type=int, default=settings.batch_size)
    seed.add_argument("--reset", action="store_true", help="Delete existing products first")

    bench = subparsers.add_parser("bench", help="Time lookups for a random stored product")
    bench.add_argument("--repeats", type=int, default=settings.benchmark_repeats)

    run = subparsers.add_parser("run", help="Seed, then benchmark")
    run.add_argument("--count", type=int, default=settings.number_of_records)
    run.add_argument("--batch-size", type=int, default=settings.batch_size)
    run.add_argument("--repeats", type=int, default=settings.benchmark_repeats)
    run.add_argument("--reset", action="store_true", help="Delete existing products first")

    explain = subparsers.add_parser("explain", help="Print the query plan of both lookups")
    explain.add_argument("--value", default=None, help="Value to plan for (default: a random stored product)")

    return parser


def print_report(report: BenchmarkReport) -> None:
    print(f"Dialect:        {report.dialect}")
    print(f"Records:        {report.record_count:,}")
    print(f"Target name:    {report.product_name}")
    print(f"Target serial:  {report.serial_number}")
    for stats in (report.non_indexed, report.indexed):
        label = "indexed" if stats.indexed else "not indexed"
        print(
            f"{stats.column:<15} ({label}): "
            f"mean {stats.mean_ns / 1_000_000:.3f} ms, "
            f"median {stats.median_ns / 1_000_000:.3f} ms, "
            f"min {stats.min_ns / 1_000_000:.3f} ms, "
            f"max {stats.max_ns / 1_000_000:.3f} ms "
            f"over {len(stats.samples)} run(s)"
        )
    if report.speedup is not None:
        print(f"Speedup:        {report.speedup:.1f}x")
    print(f"Indexed lookup not slower: {'yes' if report.indexed_not_slower else 'no'}")


def _explain(db, value: Optional[str]) -> None:
    repository = ProductRepository(db)
    if value is None:
        product = SeedService(db).pick_random_product()
        if product is None:
            raise LookupError("No products to plan a lookup for")
        values = {"product_name": product.product_name, "serial_number": product.serial_number}
    else:
        values = {column: value for column in LOOKUP_COLUMNS}

    for column, column_value in values.items():
        print(f"-- {column} = '{column_value}'")
        for line in repository.explain_lookup(column, column_value):
            print(line)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    database_url = args.database_url or settings.database_url
    engine = None
    db = None
    try:
        init_db(database_url, use_migrations=args.use_migrations)
        if args.command == "migrate":
            return 0

        engine = make_engine(database_url)
        db = session_factory(engine)()

        if args.command == "seed":
            if args.reset:
                ProductRepository(db).delete_all()
            SeedService(db).seed(args.count, batch_size=args.batch_size)
        elif args.command == "bench":
            product = SeedService(db).pick_random_product()
            if product is None:
                logger.warning("No product to benchmark, seed the table first")
                return 1
            print_report(BenchmarkService(db).compare(product, repeats=args.repeats))
        elif args.command == "run":
            report = BenchmarkService(db).run(
                args.count,
                repeats=args.repeats,
                batch_size=args.batch_size,
                reset=args.reset
            )
            if report is None:
                return 1
            print_report(report)
        elif args.command == "explain":
            _explain(db, args.value)
        return 0
    except Exception as e:
        logger.error(f"Command '{args.command}' failed: {e}", exc_info=True)
        return 1
    finally:
        if db is not None:
            db.close()
        if engine is not None:
            engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
