from sqlalchemy import Boolean, Column, Integer, String, Text

from bakery.db import Base


class Address(Base):
    __tablename__ = "addresses"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=False)
    street = Column(String(255), nullable=False)
    city = Column(String(128), nullable=False)
    notes = Column(Text, nullable=False, default="")
    is_default = Column(Boolean, nullable=False, default=False)
