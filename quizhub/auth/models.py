from datetime import datetime
from flask_login import UserMixin

from quizhub import db


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(20), nullable=False, default="USER")  # 'ADMIN' or 'USER'
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User {self.email} ({self.role})>"

    def is_admin(self) -> bool:
        return self.role == "ADMIN"

    def to_summary(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
        }
