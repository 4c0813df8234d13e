import argparse
import logging

from app.config import get_settings
from app.database.dynamodb import (
    create_table_if_not_exists,
    delete_table,
    get_db_connection,
)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create or drop the events table")
    parser.add_argument(
        "--drop", action="store_true", help="delete the table instead of creating it"
    )
    parser.add_argument("--table", help="table name (default: EVENTS_TABLE_NAME)")
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    dynamodb = get_db_connection(settings)
    table_name = args.table or settings.EVENTS_TABLE_NAME

    if args.drop:
        delete_table(dynamodb, table_name)
    else:
        create_table_if_not_exists(dynamodb, table_name)


if __name__ == "__main__":
    main()
