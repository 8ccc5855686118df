"""Initialize the database: indexes and the initial system owner

Usage:
    python -m scripts.init_db
    python -m scripts.init_db --username owner --email owner@example.com --password secret123
"""
import argparse

from helpdesk.config.settings import Settings, get_settings
from helpdesk.repositories.mongo_client import create_client, get_database, create_indexes
from helpdesk.services.container import ServiceContainer
from helpdesk.utils.logger import setup_logging, get_logger

logger = get_logger("scripts.init_db")


def main():
    settings = get_settings()
    setup_logging(settings)

    parser = argparse.ArgumentParser(description="Create indexes and the initial system owner")
    parser.add_argument("--username", default=settings.bootstrap_owner_username)
    parser.add_argument("--email", default=settings.bootstrap_owner_email)
    parser.add_argument("--password", default=settings.bootstrap_owner_password)
    args = parser.parse_args()

    client = create_client(settings)
    try:
        db = get_database(client, settings)
        create_indexes(db)

        services = ServiceContainer(settings, db)
        owner = services.users.ensure_system_owner(args.username, args.email, args.password)
        if owner:
            print(f"Created system owner: {owner.username} <{owner.email}>")
            if args.password == Settings.model_fields["bootstrap_owner_password"].default:
                print("WARNING: default password in use, change it before going live")
        else:
            print("System owner already exists, nothing to do")
    finally:
        client.close()


if __name__ == "__main__":
    main()
