"""Document store collaborator.

The gateways only see :class:`DocumentStore`: insert/get/set/update/delete by
id plus conjunctive ``where`` filters with a single sort key. The bundled
implementation maps each collection onto a SQLModel table.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from ..database import SessionLocal, get_session
from ..models import Profile, Task

logger = logging.getLogger(__name__)

Filter = Tuple[str, str, Any]
OrderBy = Tuple[str, str]

OPERATORS = {
    "==": lambda column, value: column == value,
    "<": lambda column, value: column < value,
    "<=": lambda column, value: column <= value,
    ">": lambda column, value: column > value,
    ">=": lambda column, value: column >= value,
}


class DocumentStoreError(Exception):
    """Store-specific failure identified by ``code``.

    Codes: ``not-found``, ``invalid-argument``, ``failed-precondition``,
    ``unavailable``.
    """

    def __init__(self, code: str, message: str = ""):
        self.code = code
        super().__init__(message or code)


class DocumentStore(ABC):
    @abstractmethod
    def insert(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document and return the id the store assigned."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a document by id, or ``None``."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite the document stored under ``doc_id``."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Update fields of an existing document."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Delete an existing document."""

    @abstractmethod
    def query(
        self,
        collection: str,
        where: Iterable[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Dict[str, Any]]:
        """Run a conjunctive query; every result includes its ``id``."""


class SqlDocumentStore(DocumentStore):
    """Document store over SQLModel tables."""

    collections: Dict[str, Type[SQLModel]] = {
        "users": Profile,
        "todos": Task,
    }

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal

    def _model(self, collection: str) -> Type[SQLModel]:
        model = self.collections.get(collection)
        if model is None:
            raise DocumentStoreError("invalid-argument", f"Unknown collection '{collection}'")
        return model

    def _column(self, model: Type[SQLModel], field: str):
        if field not in model.model_fields:
            raise DocumentStoreError(
                "failed-precondition",
                f"Field '{field}' is not queryable on {model.__tablename__}",
            )
        return getattr(model, field)

    @staticmethod
    def _to_dict(row: SQLModel) -> Dict[str, Any]:
        return row.model_dump()

    def insert(self, collection: str, data: Dict[str, Any]) -> str:
        model = self._model(collection)
        try:
            with get_session(self.session_factory) as session:
                row = model(**data)
                session.add(row)
                session.commit()
                session.refresh(row)
                return row.id
        except SQLAlchemyError as exc:
            logger.error("Insert into %s failed: %s", collection, exc)
            raise DocumentStoreError("unavailable", str(exc)) from exc

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        model = self._model(collection)
        try:
            with get_session(self.session_factory) as session:
                row = session.get(model, doc_id)
                return self._to_dict(row) if row is not None else None
        except SQLAlchemyError as exc:
            logger.error("Fetch %s/%s failed: %s", collection, doc_id, exc)
            raise DocumentStoreError("unavailable", str(exc)) from exc

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        model = self._model(collection)
        try:
            with get_session(self.session_factory) as session:
                session.merge(model(id=doc_id, **data))
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Write %s/%s failed: %s", collection, doc_id, exc)
            raise DocumentStoreError("unavailable", str(exc)) from exc

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        model = self._model(collection)
        try:
            with get_session(self.session_factory) as session:
                row = session.get(model, doc_id)
                if row is None:
                    raise DocumentStoreError("not-found", f"{collection}/{doc_id}")
                for field, value in fields.items():
                    self._column(model, field)
                    setattr(row, field, value)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Update %s/%s failed: %s", collection, doc_id, exc)
            raise DocumentStoreError("unavailable", str(exc)) from exc

    def delete(self, collection: str, doc_id: str) -> None:
        model = self._model(collection)
        try:
            with get_session(self.session_factory) as session:
                row = session.get(model, doc_id)
                if row is None:
                    raise DocumentStoreError("not-found", f"{collection}/{doc_id}")
                session.delete(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Delete %s/%s failed: %s", collection, doc_id, exc)
            raise DocumentStoreError("unavailable", str(exc)) from exc

    def query(
        self,
        collection: str,
        where: Iterable[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Dict[str, Any]]:
        model = self._model(collection)
        try:
            with get_session(self.session_factory) as session:
                query = session.query(model)
                for field, op, value in where:
                    if op not in OPERATORS:
                        raise DocumentStoreError("invalid-argument", f"Unsupported operator '{op}'")
                    query = query.filter(OPERATORS[op](self._column(model, field), value))

                if order_by is not None:
                    field, direction = order_by
                    column = self._column(model, field)
                    query = query.order_by(column.asc() if direction == "asc" else column.desc())

                return [self._to_dict(row) for row in query.all()]
        except SQLAlchemyError as exc:
            logger.error("Query on %s failed: %s", collection, exc)
            raise DocumentStoreError("unavailable", str(exc)) from exc
