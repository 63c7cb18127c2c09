"""Document store: collection/id keyed JSON records on top of SQLAlchemy"""

import operator
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from vema_gateway.domain.exceptions import StoreError
from vema_gateway.infrastructure.database.models import Document, new_document_id

Predicate = Tuple[str, str, Any]
OrderBy = Tuple[str, str]  # (field, "asc" | "desc")

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda field_value, options: field_value in options,
    "array-contains": lambda field_value, item: isinstance(field_value, list) and item in field_value,
}


def _matches(data: Dict[str, Any], predicates: Iterable[Predicate]) -> bool:
    for field, op, value in predicates:
        if field not in data:
            return False
        try:
            if not _OPERATORS[op](data[field], value):
                return False
        except TypeError:
            # Mismatched types (e.g. None < str) never match
            return False
    return True


def _split_predicates(
    predicates: Iterable[Predicate],
) -> Tuple[List[ColumnElement], List[Predicate]]:
    """Separate predicates SQL can evaluate on the JSON column from the rest"""
    clauses: List[ColumnElement] = []
    remaining: List[Predicate] = []
    for field, op, value in predicates:
        if op == "==" and isinstance(value, str):
            clauses.append(Document.data[field].as_string() == value)
        elif op == "in" and value and all(isinstance(option, str) for option in value):
            clauses.append(Document.data[field].as_string().in_(list(value)))
        else:
            remaining.append((field, op, value))
    return clauses, remaining


def _with_id(doc: Document) -> Dict[str, Any]:
    return {**doc.data, "id": doc.id}


class DocumentStore:
    """
    Storage capability used by the repositories.

    Writes are flushed, not committed: the request handler commits once the
    whole read-modify-write sequence has succeeded.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get(self, collection: str, doc_id: str) -> Optional[Document]:
        return self.db.get(Document, (collection, doc_id))

    def get_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self._get(collection, doc_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {collection}/{doc_id}: {e}") from e
        return _with_id(doc) if doc else None

    def query(
        self,
        collection: str,
        predicates: Sequence[Predicate] = (),
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch documents matching every (field, op, value) predicate.

        Ops: ==, !=, <, <=, >, >=, in, array-contains. Equality and membership
        on text values run in SQL against the JSON column; the remaining
        predicates are applied to the decoded documents.
        """
        for _, op, _ in predicates:
            if op not in _OPERATORS:
                raise ValueError(f"Unsupported query operator: {op}")

        clauses, remaining = _split_predicates(predicates)
        try:
            docs = (
                self.db.query(Document)
                .filter(Document.collection == collection, *clauses)
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to query {collection}: {e}") from e

        results = [_with_id(doc) for doc in docs if _matches(doc.data, remaining)]

        if order_by is not None:
            field, direction = order_by
            present = [r for r in results if r.get(field) is not None]
            missing = [r for r in results if r.get(field) is None]
            present.sort(key=lambda r: r[field], reverse=direction == "desc")
            results = present + missing

        if limit is not None:
            results = results[:limit]
        return results

    def create(self, collection: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        """Insert a document and return its id (generated if not given)"""
        doc_id = doc_id or new_document_id()
        payload = {k: v for k, v in data.items() if k != "id"}
        try:
            self.db.add(Document(collection=collection, id=doc_id, data=payload))
            self.db.flush()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to create {collection}/{doc_id}: {e}") from e
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or fully replace a document"""
        payload = {k: v for k, v in data.items() if k != "id"}
        try:
            doc = self._get(collection, doc_id)
            if doc is None:
                self.db.add(Document(collection=collection, id=doc_id, data=payload))
            else:
                doc.data = payload
            self.db.flush()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write {collection}/{doc_id}: {e}") from e

    def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        """Merge fields into an existing document"""
        try:
            doc = self._get(collection, doc_id)
            if doc is None:
                raise StoreError(f"Document {collection}/{doc_id} does not exist")
            # Reassign so SQLAlchemy sees the JSON column change
            doc.data = {**doc.data, **{k: v for k, v in partial.items() if k != "id"}}
            self.db.flush()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update {collection}/{doc_id}: {e}") from e

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            doc = self._get(collection, doc_id)
            if doc is None:
                raise StoreError(f"Document {collection}/{doc_id} does not exist")
            self.db.delete(doc)
            self.db.flush()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete {collection}/{doc_id}: {e}") from e
