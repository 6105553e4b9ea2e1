"""Document store access for product records.

Records leave the store as plain dicts with the identifier under ``_id``
as a string, ready to be serialized to JSON.
"""

from __future__ import annotations

import abc
import copy
from typing import TYPE_CHECKING

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from catalogbench._internal.errors import ConfigError, StoreError
from catalogbench._internal.logging import get_logger

if TYPE_CHECKING:
    from catalogbench._internal.types import JsonDict

logger = get_logger("service.store")

COLLECTION_NAME = "products"
DEFAULT_DATABASE = "ecommerce"


class ProductStore(abc.ABC):
    """Async persistence interface for products.

    Each method is a single-document operation; no method spans more than
    one record except ``list_products``.
    """

    @abc.abstractmethod
    async def list_products(self) -> list[JsonDict]:
        """Return every stored product in store order."""

    @abc.abstractmethod
    async def get_product(self, product_id: str) -> JsonDict | None:
        """Return the product stored under ``product_id``, or None."""

    @abc.abstractmethod
    async def insert_product(self, fields: JsonDict) -> JsonDict:
        """Store a new product and return it with its assigned ``_id``."""

    @abc.abstractmethod
    async def replace_product(self, product_id: str, fields: JsonDict) -> JsonDict | None:
        """Overwrite the fields of an existing product.

        Returns:
            The stored record, or None if the product no longer exists.
        """

    @abc.abstractmethod
    async def delete_product(self, product_id: str) -> bool:
        """Remove a product. Returns False if nothing was deleted."""

    async def close(self) -> None:  # noqa: B027
        """Release any resources held by the store."""


def _to_object_id(product_id: str) -> ObjectId | None:
    try:
        return ObjectId(product_id)
    except (InvalidId, TypeError):
        return None


def _to_record(document: JsonDict) -> JsonDict:
    record = dict(document)
    record["_id"] = str(record["_id"])
    return record


class MongoProductStore(ProductStore):
    """MongoDB-backed store using the async ``pymongo`` driver.

    An identifier that is not a valid ObjectId cannot name any document, so
    it is treated as absent rather than as a driver error.
    """

    def __init__(self, uri: str) -> None:
        self._client: AsyncMongoClient = AsyncMongoClient(uri)
        database = self._client.get_default_database(default=DEFAULT_DATABASE)
        self._collection = database[COLLECTION_NAME]

    async def list_products(self) -> list[JsonDict]:
        try:
            documents = await self._collection.find().to_list(None)
        except PyMongoError as exc:
            raise StoreError(f"Failed to list products: {exc}") from exc
        return [_to_record(doc) for doc in documents]

    async def get_product(self, product_id: str) -> JsonDict | None:
        oid = _to_object_id(product_id)
        if oid is None:
            return None
        try:
            document = await self._collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise StoreError(f"Failed to fetch product {product_id}: {exc}") from exc
        return _to_record(document) if document is not None else None

    async def insert_product(self, fields: JsonDict) -> JsonDict:
        document = {"_id": ObjectId(), **fields}
        try:
            await self._collection.insert_one(document)
        except PyMongoError as exc:
            raise StoreError(f"Failed to insert product: {exc}") from exc
        return _to_record(document)

    async def replace_product(self, product_id: str, fields: JsonDict) -> JsonDict | None:
        oid = _to_object_id(product_id)
        if oid is None:
            return None
        try:
            result = await self._collection.replace_one({"_id": oid}, fields)
        except PyMongoError as exc:
            raise StoreError(f"Failed to update product {product_id}: {exc}") from exc
        if result.matched_count == 0:
            return None
        return {"_id": product_id, **fields}

    async def delete_product(self, product_id: str) -> bool:
        oid = _to_object_id(product_id)
        if oid is None:
            return False
        try:
            result = await self._collection.delete_one({"_id": oid})
        except PyMongoError as exc:
            raise StoreError(f"Failed to delete product {product_id}: {exc}") from exc
        return result.deleted_count > 0

    async def close(self) -> None:
        await self._client.close()


class MemoryProductStore(ProductStore):
    """In-process store keeping records in insertion order.

    Identifiers are ObjectId strings so clients see the same key format as
    with MongoDB. Records are copied on the way in and out.
    """

    def __init__(self) -> None:
        self._records: dict[str, JsonDict] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def list_products(self) -> list[JsonDict]:
        return [copy.deepcopy(record) for record in self._records.values()]

    async def get_product(self, product_id: str) -> JsonDict | None:
        record = self._records.get(product_id)
        return copy.deepcopy(record) if record is not None else None

    async def insert_product(self, fields: JsonDict) -> JsonDict:
        product_id = str(ObjectId())
        record = {"_id": product_id, **copy.deepcopy(fields)}
        self._records[product_id] = record
        return copy.deepcopy(record)

    async def replace_product(self, product_id: str, fields: JsonDict) -> JsonDict | None:
        if product_id not in self._records:
            return None
        record = {"_id": product_id, **copy.deepcopy(fields)}
        self._records[product_id] = record
        return copy.deepcopy(record)

    async def delete_product(self, product_id: str) -> bool:
        return self._records.pop(product_id, None) is not None


def open_store(uri: str) -> ProductStore:
    """Create the store named by a connection string.

    Args:
        uri: ``mongodb://`` or ``mongodb+srv://`` for MongoDB, ``memory://``
            for the in-process store.

    Returns:
        An unconnected store. The Mongo driver connects lazily on first use.

    Raises:
        ConfigError: If the scheme is not recognised or the URI is rejected
            by the driver.
    """
    scheme = uri.split("://", 1)[0].lower() if "://" in uri else ""

    if scheme == "memory":
        logger.info("Using in-memory product store")
        return MemoryProductStore()

    if scheme in {"mongodb", "mongodb+srv"}:
        try:
            store = MongoProductStore(uri)
        except (PyMongoError, ValueError) as exc:
            msg = f"Invalid MongoDB connection string: {exc}"
            raise ConfigError(msg) from exc
        logger.info("Using MongoDB product store")
        return store

    msg = f"Unsupported store URI scheme: {uri!r}. Use mongodb://, mongodb+srv:// or memory://"
    raise ConfigError(msg)
