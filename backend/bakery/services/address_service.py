from typing import Dict, List

from sqlalchemy.orm import Session

from bakery.models.address import Address
from bakery.repositories.address_repo import AddressRepository


class AddressService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AddressRepository(db)

    def create_address(self, user_id: int, fields: Dict) -> Address:
        a = self.repo.create(user_id, fields)
        self.db.commit()
        self.db.refresh(a)
        return a

    def list_addresses(self, user_id: int) -> List[Address]:
        return self.repo.list_for_user(user_id)
