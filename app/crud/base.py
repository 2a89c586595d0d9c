from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session, Query

from app.models.base import BaseModel as DBBaseModel

ModelType = TypeVar("ModelType", bound=DBBaseModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Base class for CRUD operations on a SQLAlchemy model.

    Writes commit by default. Pass commit=False inside a workflow transaction
    so the caller's transaction_scope commits everything together.
    """
    def __init__(self, model: Type[ModelType]):
        """
        Initialize with SQLAlchemy model class.
        """
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Get a record by ID.
        """
        return db.get(self.model, id)

    def get_for_update(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Re-read a record with a row lock (SELECT ... FOR UPDATE) and fresh column values.
        """
        return (
            db.query(self.model)
            .filter(self.model.id == id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def paginate(self, query: Query, *, skip: int = 0, limit: int = 100) -> Tuple[List[ModelType], int]:
        """
        Apply newest-first ordering and pagination, returning (rows, total).
        """
        total = query.order_by(None).count()
        rows = query.order_by(self.model.created_at.desc()).offset(skip).limit(limit).all()
        return rows, total

    def create(
        self,
        db: Session,
        *,
        obj_in: Union[CreateSchemaType, Dict[str, Any]],
        commit: bool = True,
        **extra: Any
    ) -> ModelType:
        """
        Create a new record.
        """
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        obj_in_data = {**obj_in_data, **extra}
        db_obj = self.model(**obj_in_data)  # type: ignore
        db.add(db_obj)
        self._save(db, db_obj, commit)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        commit: bool = True
    ) -> ModelType:
        """
        Update a record.
        Only keys that map to columns are applied.
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        columns = {column.key for column in self.model.__table__.columns}
        for field, value in update_data.items():
            if field in columns:
                setattr(db_obj, field, value)

        db.add(db_obj)
        self._save(db, db_obj, commit)
        return db_obj

    def remove(self, db: Session, *, id: Any, commit: bool = True) -> Optional[ModelType]:
        """
        Remove a record by ID.
        """
        obj = db.get(self.model, id)
        if obj:
            db.delete(obj)
            if commit:
                db.commit()
            else:
                db.flush()
        return obj

    def count(self, db: Session, **filters: Any) -> int:
        query = db.query(self.model)
        for field_name, value in filters.items():
            query = query.filter(getattr(self.model, field_name) == value)
        return query.count()

    def count_grouped(self, db: Session, column: Any, *criteria: Any) -> Dict[str, int]:
        """Row counts per distinct value of a column, optionally filtered"""
        rows = db.query(column, func.count(self.model.id)).filter(*criteria).group_by(column).all()
        return {getattr(key, "value", key): count for key, count in rows}

    def count_by_month(self, db: Session, *criteria: Any) -> Dict[str, int]:
        """
        Row counts per YYYY-MM of created_at, oldest first.
        Bucketed in Python so the query is portable across backends.
        """
        buckets: Dict[str, int] = {}
        for (created_at,) in db.query(self.model.created_at).filter(*criteria).all():
            month = created_at.strftime("%Y-%m")
            buckets[month] = buckets.get(month, 0) + 1
        return dict(sorted(buckets.items()))

    @staticmethod
    def _save(db: Session, db_obj: ModelType, commit: bool) -> None:
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
