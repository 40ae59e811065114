from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class AddressIn(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=64)
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=128)
    notes: str = ""
    is_default: bool = False


class AddressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    full_name: str
    phone: str
    street: str
    city: str
    notes: Optional[str] = None
    is_default: bool
