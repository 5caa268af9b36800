"""CLI for running area quality checks over a GeoJSON extract."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from areaqa.config import get_settings
from areaqa.core.exceptions import AreaQAException
from areaqa.geometry.engine import OverlapEngine
from areaqa.geometry.rules import PolicyRegistry
from areaqa.infrastructure.database import close_db, get_session, init_db
from areaqa.repositories.anomaly_repository import AnomalyRepository
from areaqa.services.ingestion import GeoJSONAreaReader

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def run_checks(
    infile: str,
    database_url: Optional[str] = None,
    policy_names: Optional[list[str]] = None,
) -> dict[str, int]:
    """
    Run the full check pipeline.

    Args:
        infile: GeoJSON file with assembled areas
        database_url: Output database URL (default: from settings)
        policy_names: Policies to run (default: all, in registry order)

    Returns:
        Dict of record counts per policy
    """
    registry = PolicyRegistry()
    policies = registry.select(policy_names)

    reader = GeoJSONAreaReader(infile)
    engine = OverlapEngine()

    logger.info("Pass 1/2: Building area catalog...")
    build_stats = engine.build(reader)
    logger.info(f"  {build_stats.to_dict()}")

    init_db(database_url)
    repository = AnomalyRepository(get_session())

    try:
        logger.info("Pass 2/2: Running policies...")
        counts = engine.run(policies, repository)
    finally:
        repository.close()
        close_db()

    logger.info("=" * 60)
    logger.info("CHECK SUMMARY")
    logger.info("=" * 60)
    for name, count in counts.items():
        logger.info(f"  {name}: {count} records")
    logger.info(f"  written: {repository.written}, skipped: {repository.skipped}")

    return counts


def _database_url(dbname: Optional[str]) -> Optional[str]:
    if not dbname:
        return None
    if "://" in dbname:
        return dbname
    return f"sqlite:///{Path(dbname).resolve()}"


def main():
    """CLI entry point."""
    settings = get_settings()
    available = PolicyRegistry().names()

    parser = argparse.ArgumentParser(
        description=f"{settings.app_name}: find overlapping and suspicious map areas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m areaqa.cli.check areas.geojson
  python -m areaqa.cli.check areas.geojson -d overlaps.sqlite
  python -m areaqa.cli.check areas.geojsonl -p building-overlap -p landuse-overlap
        """,
    )

    parser.add_argument(
        "infile",
        help="GeoJSON file with assembled areas",
    )

    parser.add_argument(
        "--dbname",
        "-d",
        help="Output database file or URL (default: from settings)",
    )

    parser.add_argument(
        "--policy",
        "-p",
        action="append",
        choices=available,
        help="Policy to run, may be repeated (default: all)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not Path(args.infile).exists():
        logger.error(f"File not found: {args.infile}")
        sys.exit(1)

    try:
        run_checks(
            infile=args.infile,
            database_url=_database_url(args.dbname),
            policy_names=args.policy,
        )
    except KeyboardInterrupt:
        logger.info("\nCheck interrupted by user")
        sys.exit(130)
    except AreaQAException as e:
        logger.error(f"Check aborted [{e.code}]: {e.detail}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Check failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
