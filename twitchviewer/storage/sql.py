import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from database import get_db_session
from twitchviewer.models import MODELS
from twitchviewer.storage.base import DuplicateKeyError, Storage, UNIQUE_FIELDS, column_names

logger = logging.getLogger(__name__)


def _to_dict(kind, obj):
    return {name: getattr(obj, name) for name in column_names(kind)}


class DatabaseStorage(Storage):
    """Relational storage on top of the Flask-SQLAlchemy session."""

    def _get(self, kind, record_id):
        with get_db_session() as s:
            obj = s.get(MODELS[kind], record_id)
            return _to_dict(kind, obj) if obj is not None else None

    def _find(self, kind, field, value, ignore_case=False):
        model = MODELS[kind]
        column = getattr(model, field)
        if ignore_case and isinstance(value, str):
            condition = func.lower(column) == value.lower()
        else:
            condition = column == value
        with get_db_session() as s:
            obj = s.execute(select(model).where(condition).limit(1)).scalars().first()
            return _to_dict(kind, obj) if obj is not None else None

    def _list(self, kind):
        model = MODELS[kind]
        with get_db_session() as s:
            rows = s.execute(select(model).order_by(model.id)).scalars().all()
            return [_to_dict(kind, obj) for obj in rows]

    def _count(self, kind):
        with get_db_session() as s:
            return s.execute(select(func.count()).select_from(MODELS[kind])).scalar_one()

    def _insert(self, kind, values):
        with get_db_session() as s:
            obj = MODELS[kind](**values)
            s.add(obj)
            self._commit(s, kind)
            return _to_dict(kind, obj)

    def _update(self, kind, record_id, changes):
        with get_db_session() as s:
            obj = s.get(MODELS[kind], record_id)
            if obj is None:
                return None
            for key, value in changes.items():
                setattr(obj, key, value)
            self._commit(s, kind)
            return _to_dict(kind, obj)

    def _delete(self, kind, record_id):
        with get_db_session() as s:
            obj = s.get(MODELS[kind], record_id)
            if obj is None:
                return False
            s.delete(obj)
            s.commit()
            return True

    def _commit(self, s, kind):
        try:
            s.commit()
        except IntegrityError as e:
            s.rollback()
            # A concurrent writer won the race past _check_unique
            fields = [f for f, _ in UNIQUE_FIELDS.get(kind, [])]
            field = next((f for f in fields if f in str(e.orig)), fields[0] if fields else 'id')
            logger.warning(f"Integrity error on {kind}: {str(e.orig)}")
            raise DuplicateKeyError(kind, field) from e
