"""
Shared pytest fixtures: an in-memory stand-in for the Azure table service.

The fakes implement only the calls the client makes, and raise the same
azure.core exception types the service raises.
"""

import itertools

import pytest
from azure.core import MatchConditions
from azure.core.exceptions import (
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError,
)

from az_table_tutorial import PeopleTableClient


class FakeEntity(dict):
    def __init__(self, properties: dict, etag: str) -> None:
        super().__init__(properties)
        self.metadata = {"etag": etag, "timestamp": None}


class FakeTable:
    def __init__(self, name: str) -> None:
        self.name = name
        self.rows: dict[tuple[str, str], dict] = {}
        self.etags: dict[tuple[str, str], str] = {}
        self._versions = itertools.count(1)

    def _store(self, entity: dict) -> None:
        key = (entity["PartitionKey"], entity["RowKey"])
        self.rows[key] = dict(entity)
        self.etags[key] = f'W/"{next(self._versions)}"'

    def _check_etag(self, key, etag, match_condition) -> None:
        # Anything other than IfNotModified is sent unconditionally.
        if match_condition is MatchConditions.IfNotModified and self.etags[key] != etag:
            raise ResourceModifiedError("The update condition specified in the request was not satisfied.")

    def create_entity(self, entity: dict) -> None:
        if (entity["PartitionKey"], entity["RowKey"]) in self.rows:
            raise ResourceExistsError("The specified entity already exists.")
        self._store(entity)

    def submit_transaction(self, operations) -> None:
        for verb, entity in operations:
            assert verb == "create"
            if (entity["PartitionKey"], entity["RowKey"]) in self.rows:
                raise ResourceExistsError("The specified entity already exists.")
        for _, entity in operations:
            self._store(entity)

    def get_entity(self, partition_key: str, row_key: str) -> FakeEntity:
        key = (partition_key, row_key)
        if key not in self.rows:
            raise ResourceNotFoundError("The specified resource does not exist.")
        return FakeEntity({**self.rows[key], "Timestamp": "2026-01-01T00:00:00Z"}, self.etags[key])

    def query_entities(self, query_filter: str, parameters: dict):
        assert query_filter == "PartitionKey eq @pk"
        for (pk, _), row in list(self.rows.items()):
            if pk == parameters["pk"]:
                yield FakeEntity(row, self.etags[(pk, row["RowKey"])])

    def update_entity(self, entity: dict, mode, etag=None, match_condition=None) -> None:
        key = (entity["PartitionKey"], entity["RowKey"])
        if key not in self.rows:
            raise ResourceNotFoundError("The specified resource does not exist.")
        self._check_etag(key, etag, match_condition)
        self._store(entity)

    def delete_entity(self, partition_key: str, row_key: str, etag=None, match_condition=None) -> None:
        key = (partition_key, row_key)
        if key not in self.rows:
            return
        self._check_etag(key, etag, match_condition)
        del self.rows[key]
        del self.etags[key]


class FakeTableService:
    def __init__(self) -> None:
        self.tables: dict[str, FakeTable] = {}

    def create_table_if_not_exists(self, table_name: str) -> FakeTable:
        return self.tables.setdefault(table_name, FakeTable(table_name))


@pytest.fixture
def service():
    return FakeTableService()


@pytest.fixture
def client(service):
    client = PeopleTableClient(table_name="people", service=service)
    client.ensure_table()
    return client
