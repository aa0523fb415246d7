"""
SQLAlchemy model for the customers table.
"""

from sqlalchemy import Column, Date, String

from dealership.db.session import Base
from dealership.db.base_model import BaseModel

class Customer(Base, BaseModel):
    __tablename__ = "customers"

    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=False, index=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    drivers_license = Column(String, nullable=True)
    preferred_contact = Column(String, nullable=False, default="email")  # 'email' or 'sms'

    def __repr__(self):
        return f"<Customer {self.name}>"
