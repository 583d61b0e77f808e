from __future__ import annotations

from ..extensions import db


class ShopperSessionValue(db.Model):
    """
    Key/value entry of a shopper session.

    Lives for the lifetime of the basket; values are JSON.
    """
    __tablename__ = "shopper_session_values"
    __table_args__ = (
        db.UniqueConstraint("session_id", "key", name="uq_shopper_session_values_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(128), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False)
    value = db.Column(db.JSON, nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
