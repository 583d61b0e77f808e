# Overview: Service-layer operations for shopper sessions; key/value state kept for the lifetime of a basket.

from __future__ import annotations

import copy
from typing import Any

from ..extensions import db
from ..models import ShopperSessionValue


class SessionStore:
    """
    Key/value store scoped to one shopper session.

    Values must be JSON serializable. Every write is committed right away so
    the state survives into the next request of the same session.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id

    def _row(self, key: str) -> ShopperSessionValue | None:
        return (
            db.session.query(ShopperSessionValue)
            .filter_by(session_id=self.session_id, key=key)
            .first()
        )

    def get(self, key: str, default: Any = None) -> Any:
        row = self._row(key)
        if row is None or row.value is None:
            return default
        return copy.deepcopy(row.value)

    def set(self, key: str, value: Any) -> None:
        row = self._row(key)
        if row is None:
            row = ShopperSessionValue(session_id=self.session_id, key=key)
            db.session.add(row)
        row.value = copy.deepcopy(value)
        db.session.commit()

    def unset(self, key: str) -> None:
        deleted = (
            db.session.query(ShopperSessionValue)
            .filter_by(session_id=self.session_id, key=key)
            .delete(synchronize_session=False)
        )
        if deleted:
            db.session.commit()

    def exists(self, key: str) -> bool:
        return self._row(key) is not None

    def keys(self) -> list[str]:
        rows = (
            db.session.query(ShopperSessionValue.key)
            .filter_by(session_id=self.session_id)
            .order_by(ShopperSessionValue.key.asc())
            .all()
        )
        return [r.key for r in rows]

    def clear(self) -> int:
        deleted = (
            db.session.query(ShopperSessionValue)
            .filter_by(session_id=self.session_id)
            .delete(synchronize_session=False)
        )
        db.session.commit()
        return deleted
