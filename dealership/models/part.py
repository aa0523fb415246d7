"""
SQLAlchemy model for the parts table.
"""

from sqlalchemy import Column, Float, Integer, String

from dealership.db.session import Base
from dealership.db.base_model import BaseModel

class Part(Base, BaseModel):
    """
    Parts inventory. Stock only goes down through part-type repair-order
    items; restocking is a direct edit.
    """
    __tablename__ = "parts"

    part_number = Column(String, unique=True, nullable=False, index=True)
    description = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    quantity_on_hand = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=10)
    cost = Column(Float, nullable=True)
    retail_price = Column(Float, nullable=True)
    supplier = Column(String, nullable=True)
    location = Column(String, nullable=True)

    @property
    def low_stock(self) -> bool:
        return self.quantity_on_hand <= self.reorder_level

    def to_dict(self):
        data = super().to_dict()
        data["low_stock"] = self.low_stock
        return data

    def __repr__(self):
        return f"<Part {self.part_number} qty={self.quantity_on_hand}>"
