import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from waypoint.constants import ErrorMessages
from waypoint.database.session import get_db
from waypoint.utils.diff_engine import canonical_key
from waypoint.utils.exceptions import StoreError

logger = logging.getLogger(__name__)

# (list field name, element) membership filter
Contains = Tuple[str, Any]


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


class DocumentStore:
    """
    Collection-style access over the SQLAlchemy session.

    Every write commits on its own: single documents and single bulk
    operations are atomic, nothing spanning several calls is. List columns
    are treated as sets and compared with ``canonical_key``.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Document store %s failed", operation)
            raise StoreError(ErrorMessages.STORE_FAILURE, metadata={"operation": operation}) from exc

    # ---------------- READS ---------------- #

    def find(self, model, *criteria, contains: Optional[Contains] = None, order_by=None) -> List[Any]:
        """
        Returns every document of ``model`` matching all criteria.

        Args:
            model: Mapped class of the collection
            criteria: SQLAlchemy filter expressions on scalar columns
            contains: Optional ``(field, element)`` list-membership filter
            order_by: Optional ordering, defaults to the primary key
        """
        with self._guard("find"):
            query = self.db.query(model).filter(*criteria)
            query = query.order_by(order_by if order_by is not None else model.id)
            docs = query.all()

        if contains is None:
            return docs

        field, element = contains
        key = canonical_key(element)
        return [
            doc for doc in docs
            if any(canonical_key(value) == key for value in (getattr(doc, field) or []))
        ]

    def find_one(self, model, *criteria, contains: Optional[Contains] = None):
        if contains is not None:
            docs = self.find(model, *criteria, contains=contains)
            return docs[0] if docs else None

        with self._guard("find_one"):
            return self.db.query(model).filter(*criteria).first()

    # ---------------- WRITES ---------------- #

    def insert_one(self, doc):
        with self._guard("insert_one"):
            self.db.add(doc)
            self.db.commit()
            self.db.refresh(doc)
        return doc

    def update_one(
        self,
        doc,
        set: Optional[Dict[str, Any]] = None,
        unset: Iterable[str] = (),
        push: Optional[Dict[str, Any]] = None,
        pull: Optional[Dict[str, Any]] = None,
        add: Iterable[Any] = (),
    ):
        """
        Applies a partial update to one loaded document and commits it.

        ``push`` adds elements to list fields when absent; ``pull`` removes
        every matching element. Both accept a single element or a list.
        ``add`` stages new child rows (ledger entries) in the same commit.
        """
        with self._guard("update_one"):
            self._apply(doc, set, unset, push, pull)
            for child in add:
                self.db.add(child)
            self.db.commit()
        return doc

    def update_many(
        self,
        model,
        *criteria,
        contains: Optional[Contains] = None,
        set: Optional[Dict[str, Any]] = None,
        unset: Iterable[str] = (),
        push: Optional[Dict[str, Any]] = None,
        pull: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Applies the same partial update to every matching document. Returns how many matched."""
        docs = self.find(model, *criteria, contains=contains)
        if not docs:
            return 0

        with self._guard("update_many"):
            for doc in docs:
                self._apply(doc, set, unset, push, pull)
            self.db.commit()
        return len(docs)

    def delete_one(self, model, *criteria) -> bool:
        doc = self.find_one(model, *criteria)
        if doc is None:
            return False

        with self._guard("delete_one"):
            self.db.delete(doc)
            self.db.commit()
        return True

    def delete_many(self, model, *criteria) -> int:
        with self._guard("delete_many"):
            count = self.db.query(model).filter(*criteria).delete(synchronize_session=False)
            self.db.commit()
        # Loaded parents may still hold the deleted rows in their collections
        self.db.expire_all()
        return count

    @staticmethod
    def _apply(doc, set, unset, push, pull) -> None:
        for field, value in (set or {}).items():
            setattr(doc, field, value)

        for field in unset:
            setattr(doc, field, None)

        for field, value in (push or {}).items():
            current = list(getattr(doc, field) or [])
            present = {canonical_key(v) for v in current}
            for element in _as_list(value):
                if canonical_key(element) not in present:
                    present.add(canonical_key(element))
                    current.append(element)
            setattr(doc, field, current)

        for field, value in (pull or {}).items():
            removed = {canonical_key(v) for v in _as_list(value)}
            current = getattr(doc, field) or []
            setattr(doc, field, [v for v in current if canonical_key(v) not in removed])


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    return DocumentStore(db)
