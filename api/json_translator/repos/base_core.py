# api/json_translator/repos/base_core.py
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy import Table, func, select, update as sa_update, insert as sa_insert
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, DataError, OperationalError

from json_translator.repos.errors import NotFound, Conflict, Validation, Transient

logger = logging.getLogger(__name__)


class BaseCoreRepo:
    """
    Table オブジェクト 1 つに対する汎用 CRUD。
    - サブクラスは TABLE に tables.py の Table を指定する
    - DB 例外は Conflict / Validation / Transient に変換して投げ直す
    """
    TABLE: Optional[Table] = None

    def __init__(self, db: Session, *, table: Optional[Table] = None):
        self.db: Session = db
        self.sess: Session = db
        self.t: Optional[Table] = table if table is not None else self.TABLE

    def _ensure_table(self) -> Table:
        if self.t is None:
            raise Transient(f"Table metadata not available ({type(self).__name__}.TABLE is None)")
        return self.t

    # -------------------- utils --------------------

    def _coerce_to_dict(self, obj: Optional[Union[Mapping[str, Any], BaseModel]], kwargs: Dict[str, Any]) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if obj is not None:
            if isinstance(obj, BaseModel):
                data.update(obj.model_dump(exclude_unset=True, exclude_none=True))
            elif isinstance(obj, Mapping):
                data.update(dict(obj))
            else:
                raise Validation(f"Unsupported payload type: {type(obj)!r}")
        if kwargs:
            data.update(kwargs)
        return data

    def _sanitize_columns(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        t = self._ensure_table()
        colset = set(t.c.keys())
        unknown = [k for k in data.keys() if k not in colset]
        if unknown:
            raise Validation(f"Unknown fields for table '{t.name}': {sorted(unknown)}")
        return dict(data)

    # -------------------- read --------------------

    def get(self, id: int) -> dict:
        t = self._ensure_table()
        row = self.sess.execute(select(t).where(t.c.id == id)).mappings().first()
        if not row:
            raise NotFound(f"{t.name} id={id} not found")
        return dict(row)

    def list_where(self, *, order_by: List[Any], limit: Optional[int] = None, **eq_filters: Any) -> List[dict]:
        t = self._ensure_table()
        stmt = select(t)
        for k, v in eq_filters.items():
            if v is None:
                continue
            col = getattr(t.c, k, None)
            if col is not None:
                stmt = stmt.where(col == v)
        stmt = stmt.order_by(*order_by).limit(limit)
        return [dict(r) for r in self.sess.execute(stmt).mappings().all()]

    def count_by_status(self) -> Dict[str, int]:
        """SELECT status, COUNT(*) ... GROUP BY status"""
        t = self._ensure_table()
        rows = self.sess.execute(select(t.c.status, func.count()).group_by(t.c.status)).all()
        return {str(status): int(c) for status, c in rows}

    # -------------------- write --------------------

    def create(
        self,
        obj_in: Optional[Union[Mapping[str, Any], BaseModel]] = None,
        /,
        **values: Any,
    ) -> int:
        """1 行 INSERT して主キーを返す"""
        t = self._ensure_table()
        try:
            raw = self._coerce_to_dict(obj_in, values)
            data = self._sanitize_columns(raw)
            res = self.sess.execute(sa_insert(t).values(**data))
            return int(res.inserted_primary_key[0])
        except IntegrityError as e:
            raise Conflict(str(e.orig)) from e
        except DataError as e:
            raise Validation(str(e.orig)) from e
        except OperationalError as e:
            raise Transient(str(e.orig)) from e

    def create_many(self, rows: List[Mapping[str, Any]]) -> int:
        if not rows:
            return 0
        t = self._ensure_table()
        try:
            data = [self._sanitize_columns(r) for r in rows]
            self.sess.execute(sa_insert(t), data)
            logger.debug("inserted %s rows into %s", len(data), t.name)
            return len(data)
        except IntegrityError as e:
            raise Conflict(str(e.orig)) from e
        except DataError as e:
            raise Validation(str(e.orig)) from e
        except OperationalError as e:
            raise Transient(str(e.orig)) from e

    def update_by_id(self, id: int, set_map: Mapping[str, Any]) -> None:
        t = self._ensure_table()
        data = self._sanitize_columns(set_map)
        if not data:
            raise Validation("No updatable fields given.")
        try:
            res = self.sess.execute(sa_update(t).where(t.c.id == id).values(**data))
        except IntegrityError as e:
            raise Conflict(str(e.orig)) from e
        except DataError as e:
            raise Validation(str(e.orig)) from e
        except OperationalError as e:
            raise Transient(str(e.orig)) from e
        if res.rowcount == 0:
            raise NotFound(f"{t.name} id={id} not found")
