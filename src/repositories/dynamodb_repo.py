"""DynamoDB-backed document store (one table per collection, keyed by "id")."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import boto3
from boto3.dynamodb.conditions import Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from repositories.interfaces import AbsentOr, DocumentStore
from utils.error_handling import NotFoundError, PreconditionFailedError, StoreUnavailableError
from utils.logging_config import get_logger

logger = get_logger(__name__)

TRANSIENT_ERROR_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
        "InternalServerError",
        "ServiceUnavailable",
        "TransactionConflictException",
    }
)


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def build_update_expression(
    patch: Mapping[str, Any], precondition: Optional[Mapping[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build UpdateItem kwargs for SET-ing patch fields.

    The condition always requires the item to exist; precondition fields add
    equality checks (or absent-or-equal for AbsentOr) evaluated atomically
    with the write.
    """
    names: Dict[str, str] = {"#id": "id"}
    values: Dict[str, Any] = {}
    assignments: List[str] = []
    for i, (field, value) in enumerate(patch.items()):
        names[f"#f{i}"] = field
        values[f":v{i}"] = value
        assignments.append(f"#f{i} = :v{i}")

    conditions = ["attribute_exists(#id)"]
    for j, (field, expected) in enumerate((precondition or {}).items()):
        names[f"#c{j}"] = field
        if isinstance(expected, AbsentOr):
            values[f":c{j}"] = expected.value
            conditions.append(f"(attribute_not_exists(#c{j}) OR #c{j} = :c{j})")
        else:
            values[f":c{j}"] = expected
            conditions.append(f"#c{j} = :c{j}")

    return {
        "UpdateExpression": "SET " + ", ".join(assignments),
        "ConditionExpression": " AND ".join(conditions),
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
        "ReturnValues": "ALL_NEW",
    }


class DynamoDbDocumentStore(DocumentStore):
    """Document store over DynamoDB tables, with bounded client timeouts."""

    def __init__(
        self,
        table_name_for: Callable[[str], str],
        region: Optional[str] = None,
        connect_timeout: float = 2.0,
        read_timeout: float = 3.0,
        max_attempts: int = 2,
        resource=None,
    ):
        self._table_name_for = table_name_for
        self._resource = resource or boto3.resource(
            "dynamodb",
            region_name=region,
            config=Config(
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
                retries={"max_attempts": max_attempts, "mode": "standard"},
            ),
        )
        self._tables: Dict[str, Any] = {}

    def _table(self, collection: str):
        if collection not in self._tables:
            self._tables[collection] = self._resource.Table(self._table_name_for(collection))
        return self._tables[collection]

    def _call(self, op: str, collection: str, fn: Callable[[], Any]) -> Any:
        """Run a table call, translating transient failures to StoreUnavailableError."""
        try:
            return fn()
        except ClientError as exc:
            code = _error_code(exc)
            if code in TRANSIENT_ERROR_CODES:
                logger.warning(
                    "DynamoDB transient failure",
                    extra={"op": op, "collection": collection, "code": code},
                )
                raise StoreUnavailableError(f"{op} on {collection} failed: {code}") from exc
            raise
        except BotoCoreError as exc:
            logger.warning(
                "DynamoDB unreachable",
                extra={"op": op, "collection": collection, "error": str(exc)},
            )
            raise StoreUnavailableError(f"{op} on {collection} failed") from exc

    def get_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        resp = self._call(
            "get_item",
            collection,
            lambda: self._table(collection).get_item(Key={"id": doc_id}, ConsistentRead=True),
        )
        return resp.get("Item")

    def put(self, collection: str, item: Dict[str, Any]) -> None:
        self._call("put_item", collection, lambda: self._table(collection).put_item(Item=item))

    def update(self, collection: str, doc_id: str, patch: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            return self._update(collection, doc_id, patch, None)
        except PreconditionFailedError as exc:
            raise NotFoundError(f"{collection}/{doc_id} not found") from exc

    def conditional_update(
        self,
        collection: str,
        doc_id: str,
        patch: Mapping[str, Any],
        precondition: Mapping[str, Any],
    ) -> Dict[str, Any]:
        return self._update(collection, doc_id, patch, precondition)

    def _update(
        self,
        collection: str,
        doc_id: str,
        patch: Mapping[str, Any],
        precondition: Optional[Mapping[str, Any]],
    ) -> Dict[str, Any]:
        kwargs = build_update_expression(patch, precondition)
        try:
            resp = self._call(
                "update_item",
                collection,
                lambda: self._table(collection).update_item(Key={"id": doc_id}, **kwargs),
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                raise PreconditionFailedError(collection, doc_id) from exc
            raise
        return resp.get("Attributes", {})

    def query(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        table = self._table(collection)
        kwargs: Dict[str, Any] = {
            "IndexName": f"{field}-index",
            "KeyConditionExpression": Key(field).eq(value),
        }
        items, _ = self._paginate("query", collection, table.query, kwargs)
        return items

    def list_all(self, collection: str) -> List[Dict[str, Any]]:
        items, pages = self._paginate("scan", collection, self._table(collection).scan, {})
        logger.info("Scanned collection", extra={"collection": collection, "pages": pages})
        return items

    def _paginate(
        self, op: str, collection: str, fn: Callable[..., Dict[str, Any]], kwargs: Dict[str, Any]
    ) -> Tuple[List[Dict[str, Any]], int]:
        items: List[Dict[str, Any]] = []
        pages = 0
        while True:
            resp = self._call(op, collection, lambda: fn(**kwargs))
            pages += 1
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return items, pages
            kwargs = {**kwargs, "ExclusiveStartKey": last_key}
