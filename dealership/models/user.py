"""
SQLAlchemy model for the users table.
"""

from sqlalchemy import Column, String

from dealership.db.session import Base
from dealership.db.base_model import BaseModel

class User(Base, BaseModel):
    """
    Dealership staff account. The role is the sole axis of authorization.
    """
    __tablename__ = "users"
    __private_fields__ = ("password_hash",)

    email = Column(String, unique=True, nullable=False, index=True)  # stored lower-case
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)
    phone = Column(String, nullable=True)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
