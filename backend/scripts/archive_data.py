"""Run one retention sweep out-of-band

Moves tickets (with their notes), audit logs and login history older
than RETENTION_MONTHS into archived_data. Do not run two sweeps at once.

Usage:
    python -m scripts.archive_data
    python -m scripts.archive_data --as-of 2025-01-01T00:00:00Z
"""
import argparse
import sys

from helpdesk.config.settings import get_settings
from helpdesk.repositories.mongo_client import create_client, get_database
from helpdesk.services.container import ServiceContainer
from helpdesk.utils.idgen import generate_correlation_id
from helpdesk.utils.logger import setup_logging, set_correlation_id
from helpdesk.utils.time import format_iso, parse_iso


def main() -> int:
    parser = argparse.ArgumentParser(description="Archive aged helpdesk data")
    parser.add_argument(
        "--as-of",
        help="Reference time (ISO 8601); the cutoff is RETENTION_MONTHS before it. Defaults to now."
    )
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings)
    set_correlation_id(generate_correlation_id())

    client = create_client(settings)
    try:
        services = ServiceContainer(settings, get_database(client, settings))
        result = services.retention.run(parse_iso(args.as_of) if args.as_of else None)
    finally:
        client.close()

    print(f"Cutoff: {format_iso(result.cutoff)}")
    for table, count in result.archived.items():
        print(f"  {table}: archived {count}")
    for table, error in result.failed.items():
        print(f"  {table}: FAILED ({error})")

    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
