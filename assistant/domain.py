"""
Domain records the assistant reads from.

These mirror what the POS front end already stores. The assistant never
mutates them; each call projects only the fields its task is allowed to see.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from inference import InlineImage


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Product(_Record):
    id: str
    name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    price: float = 0.0
    stock: float = 0.0
    unit: Optional[str] = None
    expiry_date: Optional[str] = None


class SaleItem(_Record):
    product_id: Optional[str] = None
    name: str
    quantity: float = 1.0
    price: float = 0.0


class Sale(_Record):
    id: str
    date: datetime
    items: List[SaleItem] = Field(default_factory=list)
    total: float = 0.0
    cashier: Optional[str] = None
    customer_mobile: Optional[str] = None


class Customer(_Record):
    id: str
    name: str
    mobile: Optional[str] = None
    email: Optional[str] = None
    loyalty_points: float = 0.0
    is_member: bool = False
    face_attributes: Optional[str] = None   # stored face descriptor text

    @property
    def has_face_descriptor(self) -> bool:
        return bool(self.face_attributes and self.face_attributes.strip())


class DomainSlice(BaseModel):
    """Read-only ambient data handed to a single call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    products: List[Product] = Field(default_factory=list)
    sales: List[Sale] = Field(default_factory=list)
    customers: List[Customer] = Field(default_factory=list)
    cart_item_names: List[str] = Field(default_factory=list)
    image: Optional[InlineImage] = None

    @property
    def product_ids(self) -> set:
        return {p.id for p in self.products}

    @property
    def customers_with_descriptor(self) -> List[Customer]:
        return [c for c in self.customers if c.has_face_descriptor]
