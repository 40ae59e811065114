from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from bakery.models.address import Address


class AddressRepository:
    def __init__(self, db: Session):
        self.db = db

    def find(self, address_id: int, user_id: int) -> Optional[Address]:
        """Address by id, only when it belongs to ``user_id``."""
        return (
            self.db.query(Address)
            .filter(Address.id == address_id, Address.user_id == user_id)
            .first()
        )

    def list_for_user(self, user_id: int) -> List[Address]:
        return (
            self.db.query(Address)
            .filter(Address.user_id == user_id)
            .order_by(Address.id)
            .all()
        )

    def create(self, user_id: int, fields: Dict) -> Address:
        a = Address(user_id=user_id, **fields)
        self.db.add(a)
        self.db.flush()
        return a
