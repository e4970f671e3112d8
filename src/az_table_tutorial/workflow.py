"""
workflow.py
-----------
The fixed create/read/update/delete walkthrough and its console entry point.

The table must be deleted before rerunning: the first insert fails on a
table that still holds Walter.
"""

import logging
import os
from collections.abc import Callable
from dotenv import load_dotenv

from .az_table_tutorial import (
    CustomerEntity,
    Found,
    PeopleTableClient,
    StorageOperationFailure,
)

logger = logging.getLogger(__name__)

# Single partition: fine for a walkthrough, not for scalability.
PARTITION_NAME = "My_Peoples_Partition"

# ------------------------------------------------------------------
# Read Steps
# ------------------------------------------------------------------

def format_row(record: CustomerEntity) -> str:
    return f"{record.partition_key}; {record.row_key}; {record.email}; {record.phone_number}"

def _print_partition(client: PeopleTableClient, partition_key: str, write: Callable[[str], None]) -> None:
    for record in client.query_partition(partition_key):
        write(format_row(record))
    write("")

def _print_ben_phone(client: PeopleTableClient, partition_key: str, write: Callable[[str], None]) -> None:
    result = client.retrieve(partition_key, "Ben")
    if isinstance(result, Found):
        write(f"Ben's phone number: {result.record.phone_number}")
    else:
        write("Ben's phone number could not be retrieved.")

# ------------------------------------------------------------------
# Workflow
# ------------------------------------------------------------------

def run_workflow(
    client:        PeopleTableClient,
    partition_key: str = PARTITION_NAME,
    write:         Callable[[str], None] = print,
) -> StorageOperationFailure | None:
    """Runs every step in order. Returns the first storage failure, which ends the run."""
    try:
        client.ensure_table()

        # Create
        logger.info("Inserting customers into partition %s", partition_key)
        client.insert(CustomerEntity(partition_key, "Walter", "Walter@contoso.com", "425-555-0101"))
        client.insert_batch([
            CustomerEntity(partition_key, "Jeff", "Jeff@contoso.com", "425-555-0104"),
            CustomerEntity(partition_key, "Ben",  "Ben@contoso.com",  "425-555-0102"),
        ])

        # Read
        logger.info("Reading partition %s", partition_key)
        _print_partition(client, partition_key, write)
        _print_ben_phone(client, partition_key, write)

        # Update
        result = client.retrieve(partition_key, "Ben")
        if isinstance(result, Found):
            result.record.phone_number = "425-555-0105"
            client.replace(result.record)
            write("Ben's phone number updated.")
        else:
            write("Entity could not be retrieved.")

        # Delete
        result = client.retrieve(partition_key, "Walter")
        if isinstance(result, Found):
            client.delete(result.record)
            write("Walter's entity deleted.")
        else:
            write("Could not retrieve the entity.")
        write("")

        # Read again
        logger.info("Reading partition %s after changes", partition_key)
        _print_partition(client, partition_key, write)
        _print_ben_phone(client, partition_key, write)
    except StorageOperationFailure as failure:
        logger.warning("Workflow aborted: %s", failure.message)
        return failure
    return None

# ------------------------------------------------------------------
# Console Entry Point
# ------------------------------------------------------------------

def main() -> int:
    load_dotenv()
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING").upper(),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    partition_key = os.environ.get("PEOPLE_PARTITION_NAME") or PARTITION_NAME
    client = PeopleTableClient()

    failure = run_workflow(client, partition_key)
    if failure is not None:
        print("oops..." + failure.message)
    return 0
