"""Document store over the `documents` table.

Collections hold JSON objects keyed by a string ID. Patches support the
array-union, array-remove and increment primitives the newsquest components
rely on; each call runs in its own transaction.
"""

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.database import get_session
from db.models import Document
from errors import NotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArrayUnion:
    """Append items not already present in the target list."""

    items: tuple[Any, ...]

    def __init__(self, *items: Any) -> None:
        object.__setattr__(self, "items", items)

    def apply(self, current: Any) -> list[Any]:
        result = list(current) if isinstance(current, list) else []
        for item in self.items:
            if item not in result:
                result.append(item)
        return result


@dataclass(frozen=True)
class ArrayRemove:
    """Remove every occurrence of the items from the target list."""

    items: tuple[Any, ...]

    def __init__(self, *items: Any) -> None:
        object.__setattr__(self, "items", items)

    def apply(self, current: Any) -> list[Any]:
        if not isinstance(current, list):
            return []
        return [item for item in current if item not in self.items]


@dataclass(frozen=True)
class Increment:
    """Add `amount` to a numeric field (missing fields count as 0)."""

    amount: int | float

    def apply(self, current: Any) -> int | float:
        base = current if isinstance(current, (int, float)) else 0
        return base + self.amount


_FieldOp = ArrayUnion | ArrayRemove | Increment


def _lt(a: Any, b: Any) -> bool:
    return a is not None and b is not None and a < b


def _gt(a: Any, b: Any) -> bool:
    return a is not None and b is not None and a > b


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda field, value: field == value,
    "!=": lambda field, value: field != value,
    "<": _lt,
    "<=": lambda field, value: field == value or _lt(field, value),
    ">": _gt,
    ">=": lambda field, value: field == value or _gt(field, value),
    "in": lambda field, value: field in value,
    "array-contains": lambda field, value: isinstance(field, list) and value in field,
    "array-contains-any": lambda field, value: (
        isinstance(field, list) and any(v in field for v in value)
    ),
}


def _order(
    docs: list[dict[str, Any]], order_by: str | None, descending: bool
) -> list[dict[str, Any]]:
    """Sort documents by a field; documents missing the field go last."""
    if not order_by:
        return docs
    present = [d for d in docs if d.get(order_by) is not None]
    missing = [d for d in docs if d.get(order_by) is None]
    present.sort(key=lambda d: d[order_by], reverse=descending)
    return present + missing


class DocumentStore:
    """Collections of JSON documents persisted through SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session] = get_session) -> None:
        self._session_factory = session_factory

    def _load(self, session: Session, collection: str, doc_id: str) -> Document | None:
        return (
            session.query(Document)
            .filter(Document.collection == collection, Document.doc_id == doc_id)
            .one_or_none()
        )

    @staticmethod
    def _decode(row: Document) -> dict[str, Any]:
        data = json.loads(row.data) if row.data else {}
        data["id"] = row.doc_id
        return data

    @staticmethod
    def _encode(data: dict[str, Any]) -> str:
        return json.dumps({k: v for k, v in data.items() if k != "id"})

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return the document with its ID under "id", or None if missing."""
        session = self._session_factory()
        try:
            row = self._load(session, collection, doc_id)
            return self._decode(row) if row is not None else None
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"read {collection}/{doc_id} failed: {e}") from e
        finally:
            session.close()

    def set_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or fully replace a document."""
        session = self._session_factory()
        try:
            row = self._load(session, collection, doc_id)
            if row is None:
                row = Document(collection=collection, doc_id=doc_id)
                session.add(row)
            row.data = self._encode(data)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreUnavailableError(f"write {collection}/{doc_id} failed: {e}") from e
        finally:
            session.close()

    def update_fields(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Patch top-level fields of an existing document.

        Values may be plain JSON values or ArrayUnion/ArrayRemove/Increment
        operations. All fields are written in one transaction. Raises
        NotFoundError when the document does not exist.
        """
        session = self._session_factory()
        try:
            row = self._load(session, collection, doc_id)
            if row is None:
                raise NotFoundError(collection, doc_id)
            data = json.loads(row.data) if row.data else {}
            for name, value in fields.items():
                if isinstance(value, _FieldOp):
                    data[name] = value.apply(data.get(name))
                else:
                    data[name] = value
            row.data = self._encode(data)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreUnavailableError(f"update {collection}/{doc_id} failed: {e}") from e
        finally:
            session.close()

    def delete_document(self, collection: str, doc_id: str) -> None:
        session = self._session_factory()
        try:
            row = self._load(session, collection, doc_id)
            if row is not None:
                session.delete(row)
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreUnavailableError(f"delete {collection}/{doc_id} failed: {e}") from e
        finally:
            session.close()

    def _scan(self, collection: str) -> list[dict[str, Any]]:
        session = self._session_factory()
        try:
            rows = (
                session.query(Document)
                .filter(Document.collection == collection)
                .order_by(Document.id)
                .all()
            )
            return [self._decode(row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"scan {collection} failed: {e}") from e
        finally:
            session.close()

    def list_documents(
        self,
        collection: str,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return every document in a collection, optionally ordered and limited."""
        docs = _order(self._scan(collection), order_by, descending)
        return docs[:limit] if limit is not None else docs

    def query_by_field(
        self,
        collection: str,
        field: str,
        op: str,
        value: Any,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return documents whose `field` satisfies `op` against `value`."""
        try:
            predicate = _OPERATORS[op]
        except KeyError:
            raise ValueError(f"Unsupported query operator: {op!r}") from None
        if op in ("in", "array-contains-any") and isinstance(value, (str, bytes)):
            raise ValueError(f"Operator {op!r} needs a collection of values")
        if op in ("in", "array-contains-any"):
            value = list(value) if isinstance(value, Iterable) else [value]

        matched = [d for d in self._scan(collection) if predicate(d.get(field), value)]
        docs = _order(matched, order_by, descending)
        logger.debug(
            "query %s where %s %s %r -> %d docs", collection, field, op, value, len(docs)
        )
        return docs[:limit] if limit is not None else docs
