"""
Operation catalog.

Maps operation ids to HTTP method, path and request schema, built once from
an OpenAPI-style document. Lookup is authoritative: the pipeline never
guesses a method or path for an operation id.
"""

import functools
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Union

from visa_sdk.exceptions import ConfigurationError
from visa_sdk.models import RequestConfig

logger = logging.getLogger("visa_sdk.catalog")

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "vop.openapi.json"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# OpenAPI extension marking operations whose body must be MLE-encrypted
MLE_EXTENSION = "x-visa-mle"


class OperationId(str, Enum):
    """Operations of the bundled Visa Offers Platform catalog"""

    ADD_CARD = "Users_Addcard"
    DELETE_CARD = "Users_DeleteCard"
    ENROLL_USER = "Users_Enroll"
    GET_USER = "Users_GetUserEnrollmentRecord"
    UNENROLL_USER = "Users_UnEnroll"


@dataclass(frozen=True)
class Operation:
    """A single catalog entry"""

    operation_id: str
    method: str
    path: str
    request_schema: Mapping[str, Any] = field(default_factory=dict)
    encrypted: bool = False

    def bind(self, config: RequestConfig) -> RequestConfig:
        """Apply this operation's method and path to a request config"""
        return config.overlay(method=self.method, url=self.path)

    def invoke(self, send: Callable[[RequestConfig], Any], config: RequestConfig) -> Any:
        """
        Send ``config`` bound to this operation

        ``send`` may be sync or async; its return value is passed through.
        """
        return send(self.bind(config))


def _resolve_ref(document: Mapping[str, Any], schema: Mapping[str, Any]) -> Mapping[str, Any]:
    ref = schema.get("$ref")
    if not ref:
        return schema
    if not ref.startswith("#/"):
        raise ConfigurationError(f"Unsupported schema reference: {ref}")

    node: Any = document
    for part in ref[2:].split("/"):
        try:
            node = node[part]
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Unresolvable schema reference: {ref}") from e
    return node


def _request_schema(document: Mapping[str, Any], entry: Mapping[str, Any]) -> Mapping[str, Any]:
    content = (entry.get("requestBody") or {}).get("content") or {}
    media = content.get("application/json") or {}
    return _resolve_ref(document, media.get("schema") or {})


class OperationCatalog:
    """
    Static operation-id lookup table.

    Example:
        >>> catalog = OperationCatalog.load_default()
        >>> op = catalog.resolve(OperationId.ENROLL_USER)
        >>> op.method, op.path
        ('POST', '/vop/v1/users/enroll')
    """

    def __init__(self, operations: Mapping[str, Operation]):
        self._operations: Dict[str, Operation] = dict(operations)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "OperationCatalog":
        """
        Build a catalog from an OpenAPI-style document

        Raises:
            ConfigurationError: On duplicate operation ids or bad references
        """
        operations: Dict[str, Operation] = {}

        for path, item in (document.get("paths") or {}).items():
            for method in HTTP_METHODS:
                entry = item.get(method)
                if not entry or "operationId" not in entry:
                    continue

                operation_id = entry["operationId"]
                if operation_id in operations:
                    raise ConfigurationError(f"Duplicate operationId: {operation_id}")

                operations[operation_id] = Operation(
                    operation_id=operation_id,
                    method=method.upper(),
                    path=path,
                    request_schema=_request_schema(document, entry),
                    encrypted=bool(entry.get(MLE_EXTENSION, False)),
                )

        logger.debug("Loaded %d catalog operations", len(operations))
        return cls(operations)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "OperationCatalog":
        """Build a catalog from a JSON document on disk"""
        try:
            with open(path, encoding="utf-8") as fh:
                document = json.load(fh)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot load operation catalog {path}: {e}") from e
        return cls.from_document(document)

    @classmethod
    @functools.lru_cache(maxsize=None)
    def load_default(cls) -> "OperationCatalog":
        """
        Catalog from the bundled Visa Offers Platform document

        The document is read once per process; every client shares the
        result, which is never mutated.
        """
        return cls.load(DEFAULT_CATALOG_PATH)

    def resolve(self, operation_id: Union[OperationId, str]) -> Operation:
        """
        Look up an operation

        Raises:
            ConfigurationError: If the id is not in the catalog
        """
        key = operation_id.value if isinstance(operation_id, OperationId) else operation_id
        operation: Optional[Operation] = self._operations.get(key)
        if operation is None:
            raise ConfigurationError(f"Invalid operationId: {key}")
        return operation

    def __contains__(self, operation_id: object) -> bool:
        key = operation_id.value if isinstance(operation_id, OperationId) else operation_id
        return key in self._operations

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)
