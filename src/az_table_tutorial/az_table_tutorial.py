"""
az_table_tutorial.py
--------------------
Azure Table Storage client for the customer records of the tutorial.
"""

import logging
import os
from dataclasses import dataclass
from azure.core import MatchConditions
from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.data.tables import TableServiceClient, UpdateMode

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = "people"

# ------------------------------------------------------------------
# Environment Helper
# ------------------------------------------------------------------

def _get_env(*names: str, default: str | None = None) -> str:
    """Returns the first of the given environment variables that is set."""
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    if default is not None:
        return default
    raise EnvironmentError(f"Required environment variable '{names[0]}' is not set.")

# ------------------------------------------------------------------
# Records and Results
# ------------------------------------------------------------------

class StorageOperationFailure(Exception):
    """Raised when any call to the table service fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class CustomerEntity:
    partition_key: str
    row_key:       str
    email:         str = ""
    phone_number:  str = ""
    etag:          str | None = None


@dataclass(frozen=True)
class Found:
    record: CustomerEntity


@dataclass(frozen=True)
class NotFound:
    partition_key: str
    row_key:       str


RetrieveResult = Found | NotFound

# ------------------------------------------------------------------
# Internal Helpers
# ------------------------------------------------------------------

def _record_to_entity(record: CustomerEntity) -> dict:
    """Builds the table entity; the etag travels as a request condition, not a property."""
    return {
        "PartitionKey": record.partition_key,
        "RowKey":       record.row_key,
        "Email":        record.email,
        "PhoneNumber":  record.phone_number,
    }

def _entity_to_record(entity) -> CustomerEntity:
    """Typed view of a service entity. Timestamp and unknown properties are dropped."""
    metadata = getattr(entity, "metadata", None) or {}
    return CustomerEntity(
        partition_key=entity["PartitionKey"],
        row_key=entity["RowKey"],
        email=entity.get("Email", ""),
        phone_number=entity.get("PhoneNumber", ""),
        etag=metadata.get("etag"),
    )

def _condition(record: CustomerEntity) -> dict:
    if record.etag is None:
        return {}
    return {"etag": record.etag, "match_condition": MatchConditions.IfNotModified}

def _failure(exc: AzureError) -> StorageOperationFailure:
    return StorageOperationFailure(exc.message or str(exc))

# ------------------------------------------------------------------
# Public Client Class
# ------------------------------------------------------------------

class PeopleTableClient:
    def __init__(self,
        connection_string: str | None = None,
        table_name:        str | None = None,
        *,
        service:           TableServiceClient | None = None,
    ) -> None:
        self.table_name = table_name or _get_env("PEOPLE_TABLE_NAME", default=DEFAULT_TABLE_NAME)
        self.table      = None

        if service is None:
            connection_string = connection_string or _get_env(
                "AzureWebJobsStorage", "AZURE_STORAGE_CONNECTION_STRING"
            )
            service = TableServiceClient.from_connection_string(connection_string)
        self.service = service

    def _require_table(self):
        if self.table is None:
            raise RuntimeError("Table is not ready.")
        return self.table

    def ensure_table(self) -> None:
        logger.debug("Ensuring table '%s' exists", self.table_name)
        try:
            self.table = self.service.create_table_if_not_exists(self.table_name)
        except AzureError as exc:
            raise _failure(exc) from exc

    def insert(self, record: CustomerEntity) -> CustomerEntity:
        table = self._require_table()
        logger.debug("Inserting %s/%s", record.partition_key, record.row_key)
        try:
            table.create_entity(_record_to_entity(record))
        except AzureError as exc:
            raise _failure(exc) from exc
        return record

    def insert_batch(self, records: list[CustomerEntity]) -> list[CustomerEntity]:
        table = self._require_table()
        if not records:
            return records

        partitions = {r.partition_key for r in records}
        if len(partitions) != 1:
            raise ValueError(f"insert_batch: records span several partitions: {sorted(partitions)}")

        logger.debug("Submitting batch of %d inserts", len(records))
        operations = [("create", _record_to_entity(r)) for r in records]
        try:
            table.submit_transaction(operations)
        except AzureError as exc:
            raise _failure(exc) from exc
        return records

    def query_partition(self, partition_key: str) -> list[CustomerEntity]:
        table = self._require_table()
        logger.debug("Querying partition %s", partition_key)
        try:
            entities = table.query_entities("PartitionKey eq @pk", parameters={"pk": partition_key})
            return [_entity_to_record(e) for e in entities]
        except AzureError as exc:
            raise _failure(exc) from exc

    def retrieve(self, partition_key: str, row_key: str) -> RetrieveResult:
        table = self._require_table()
        logger.debug("Retrieving %s/%s", partition_key, row_key)
        try:
            entity = table.get_entity(partition_key=partition_key, row_key=row_key)
        except ResourceNotFoundError:
            return NotFound(partition_key, row_key)
        except AzureError as exc:
            raise _failure(exc) from exc
        return Found(_entity_to_record(entity))

    def replace(self, record: CustomerEntity) -> None:
        """Replaces the stored entity, only if it is unchanged since `record` was read."""
        table = self._require_table()
        logger.debug("Replacing %s/%s", record.partition_key, record.row_key)
        try:
            table.update_entity(_record_to_entity(record), mode=UpdateMode.REPLACE, **_condition(record))
        except AzureError as exc:
            raise _failure(exc) from exc

    def delete(self, record: CustomerEntity) -> None:
        """Deletes the stored entity, only if it is unchanged since `record` was read."""
        table = self._require_table()
        logger.debug("Deleting %s/%s", record.partition_key, record.row_key)
        try:
            table.delete_entity(
                partition_key=record.partition_key, row_key=record.row_key, **_condition(record)
            )
        except AzureError as exc:
            raise _failure(exc) from exc
