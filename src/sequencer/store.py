"""DynamoDB store adapter for sequence records."""

from __future__ import annotations

import random
import time
from decimal import Decimal
from typing import Any, Iterable, Iterator, Protocol

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from sequencer.config import SequencerConfig
from sequencer.errors import StorageBackendError
from sequencer.models import KEY_ATTRIBUTE, VALUE_ATTRIBUTE, TableStatus, WriteResult

BATCH_GET_LIMIT = 100
MAX_UNPROCESSED_RETRIES = 8

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def make_client(config: SequencerConfig) -> Any:
    """Build a low-level DynamoDB client from config."""
    session = boto3.Session(region_name=config.region)
    return session.client(
        "dynamodb",
        region_name=config.region,
        endpoint_url=config.endpoint_url,
        config=BotoConfig(
            connect_timeout=config.request_timeout_s,
            read_timeout=config.request_timeout_s,
            retries={"max_attempts": 5, "mode": "standard"},
        ),
    )


def _error_code(err: Exception) -> str:
    if isinstance(err, ClientError):
        return str(err.response.get("Error", {}).get("Code", ""))
    return ""


def _serialize(item: dict[str, Any]) -> dict[str, Any]:
    return {k: _serializer.serialize(v) for k, v in item.items()}


def _deserialize(item: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in item.items():
        value = _deserializer.deserialize(v)
        if isinstance(value, Decimal) and value == value.to_integral_value():
            value = int(value)
        out[k] = value
    return out


def _projection(attributes: Iterable[str]) -> tuple[str, dict[str, str]]:
    names = {f"#a{i}": attr for i, attr in enumerate(attributes)}
    return ", ".join(names), names


class StoreProtocol(Protocol):
    """Operations the sequence table requires from its store."""

    table_name: str

    def table_exists(self) -> bool: ...

    def create_table(self, read_units: int, write_units: int) -> bool: ...

    def describe_status(self) -> TableStatus: ...

    def key_attributes(self) -> list[str]: ...

    def get_consistent(self, ident: str) -> dict[str, Any] | None: ...

    def put_conditional(self, ident: str, value: int, expected: int | None) -> WriteResult: ...

    def batch_get(
        self, attributes: list[str], idents: list[str], *, consistent: bool = True
    ) -> list[dict[str, Any]]: ...

    def count(self, ident: str) -> int: ...

    def scan_all(self, attributes: list[str]) -> Iterator[dict[str, Any]]: ...

    def batch_delete(self, keys: list[dict[str, Any]], max_batch_size: int = 25) -> int: ...

    def delete_item(self, ident: str) -> None: ...


class DynamoStore:
    """Thin wrapper over the boto3 DynamoDB client, bound to one table.

    Every call is a blocking network request. The only error this adapter
    interprets is the conditional-check failure on ``put_conditional``, which
    is returned as ``WriteResult.CONFLICT``; everything else propagates.
    """

    def __init__(self, table_name: str, client: Any) -> None:
        self.table_name = table_name
        self._client = client

    # --- Table lifecycle ---

    def _describe(self) -> dict[str, Any] | None:
        try:
            return self._client.describe_table(TableName=self.table_name)["Table"]
        except ClientError as e:
            if _error_code(e) == "ResourceNotFoundException":
                return None
            raise

    def table_exists(self) -> bool:
        return self._describe() is not None

    def create_table(self, read_units: int, write_units: int) -> bool:
        """Issue CreateTable; returns False if another creator got there first."""
        try:
            self._client.create_table(
                TableName=self.table_name,
                AttributeDefinitions=[{"AttributeName": KEY_ATTRIBUTE, "AttributeType": "S"}],
                KeySchema=[{"AttributeName": KEY_ATTRIBUTE, "KeyType": "HASH"}],
                ProvisionedThroughput={
                    "ReadCapacityUnits": read_units,
                    "WriteCapacityUnits": write_units,
                },
            )
        except ClientError as e:
            if _error_code(e) == "ResourceInUseException":
                return False
            raise
        return True

    def describe_status(self) -> TableStatus:
        table = self._describe()
        if table is None:
            return TableStatus.ABSENT
        return TableStatus(table["TableStatus"])

    def key_attributes(self) -> list[str]:
        table = self._describe()
        if table is None:
            return [KEY_ATTRIBUTE]
        # HASH first, then RANGE when present.
        schema = sorted(table["KeySchema"], key=lambda k: k["KeyType"] != "HASH")
        return [k["AttributeName"] for k in schema]

    # --- Items ---

    def get_consistent(self, ident: str) -> dict[str, Any] | None:
        resp = self._client.get_item(
            TableName=self.table_name,
            Key=_serialize({KEY_ATTRIBUTE: ident}),
            ConsistentRead=True,
        )
        item = resp.get("Item")
        return _deserialize(item) if item else None

    def put_conditional(self, ident: str, value: int, expected: int | None) -> WriteResult:
        kwargs: dict[str, Any] = {
            "TableName": self.table_name,
            "Item": _serialize({KEY_ATTRIBUTE: ident, VALUE_ATTRIBUTE: value}),
        }
        if expected is None:
            kwargs["ConditionExpression"] = "attribute_not_exists(#k)"
            kwargs["ExpressionAttributeNames"] = {"#k": KEY_ATTRIBUTE}
        else:
            # Stored value must equal expected and be below the new value.
            kwargs["ConditionExpression"] = "#v = :expected AND #v < :value"
            kwargs["ExpressionAttributeNames"] = {"#v": VALUE_ATTRIBUTE}
            kwargs["ExpressionAttributeValues"] = {
                ":expected": _serializer.serialize(expected),
                ":value": _serializer.serialize(value),
            }

        try:
            self._client.put_item(**kwargs)
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                return WriteResult.CONFLICT
            raise
        return WriteResult.APPLIED

    def batch_get(
        self, attributes: list[str], idents: list[str], *, consistent: bool = True
    ) -> list[dict[str, Any]]:
        attrs = list(dict.fromkeys([KEY_ATTRIBUTE, *attributes]))
        projection, names = _projection(attrs)
        rows: list[dict[str, Any]] = []
        unique = list(dict.fromkeys(idents))
        for start in range(0, len(unique), BATCH_GET_LIMIT):
            batch = unique[start : start + BATCH_GET_LIMIT]
            request: dict[str, Any] = {
                self.table_name: {
                    "Keys": [_serialize({KEY_ATTRIBUTE: i}) for i in batch],
                    "ProjectionExpression": projection,
                    "ExpressionAttributeNames": names,
                    "ConsistentRead": consistent,
                }
            }
            attempt = 0
            while request:
                resp = self._client.batch_get_item(RequestItems=request)
                found = resp.get("Responses", {}).get(self.table_name, [])
                rows.extend(_deserialize(i) for i in found)
                request = resp.get("UnprocessedKeys") or {}
                attempt = self._pause_for_unprocessed(request, attempt, "batch_get")
        return rows

    def count(self, ident: str) -> int:
        resp = self._client.query(
            TableName=self.table_name,
            KeyConditionExpression="#k = :k",
            ExpressionAttributeNames={"#k": KEY_ATTRIBUTE},
            ExpressionAttributeValues={":k": _serializer.serialize(ident)},
            Select="COUNT",
            ConsistentRead=True,
        )
        return int(resp.get("Count", 0))

    def scan_all(self, attributes: list[str]) -> Iterator[dict[str, Any]]:
        projection, names = _projection(attributes)
        kwargs: dict[str, Any] = {
            "TableName": self.table_name,
            "ProjectionExpression": projection,
            "ExpressionAttributeNames": names,
            "ConsistentRead": True,
        }
        while True:
            resp = self._client.scan(**kwargs)
            for item in resp.get("Items", []):
                yield _deserialize(item)
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return
            kwargs["ExclusiveStartKey"] = last_key

    def batch_delete(self, keys: list[dict[str, Any]], max_batch_size: int = 25) -> int:
        deleted = 0
        for start in range(0, len(keys), max_batch_size):
            chunk = keys[start : start + max_batch_size]
            request: dict[str, Any] = {
                self.table_name: [{"DeleteRequest": {"Key": _serialize(k)}} for k in chunk]
            }
            attempt = 0
            while request:
                resp = self._client.batch_write_item(RequestItems=request)
                request = resp.get("UnprocessedItems") or {}
                attempt = self._pause_for_unprocessed(request, attempt, "batch_delete")
            deleted += len(chunk)
        return deleted

    def delete_item(self, ident: str) -> None:
        self._client.delete_item(TableName=self.table_name, Key=_serialize({KEY_ATTRIBUTE: ident}))

    def _pause_for_unprocessed(self, request: dict[str, Any], attempt: int, operation: str) -> int:
        if not request:
            return attempt
        attempt += 1
        if attempt > MAX_UNPROCESSED_RETRIES:
            detail = f"items still unprocessed on '{self.table_name}' after {attempt - 1} retries"
            raise StorageBackendError(operation, detail)
        time.sleep(min(1.0, 0.05 * 2**attempt) * random.uniform(0.5, 1.0))
        return attempt
