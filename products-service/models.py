import threading
from decimal import Decimal
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price: Decimal

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


# Données initiales du catalogue
SEED_PRODUCTS: List[Product] = [
    Product(id=1, name="Laptop", price=Decimal("999.99")),
    Product(id=2, name="Mouse", price=Decimal("29.99")),
    Product(id=3, name="Keyboard", price=Decimal("79.99")),
]


class ProductStore:
    """In-memory, ordered product collection.

    Every read and write goes through a single lock so concurrent creates
    can never be handed the same id. Ids are never reused: the highest id
    ever issued is remembered even after that product is deleted.
    """

    def __init__(self, products: Optional[Iterable[Product]] = None):
        self._lock = threading.Lock()
        self._products: List[Product] = list(products or [])
        self._last_id = max((p.id for p in self._products), default=0)

    @classmethod
    def seeded(cls) -> "ProductStore":
        return cls(SEED_PRODUCTS)

    def all(self) -> List[Product]:
        with self._lock:
            return list(self._products)

    def find(self, product_id: int) -> Optional[Product]:
        with self._lock:
            return next((p for p in self._products if p.id == product_id), None)

    def add(self, name: str, price: Decimal) -> Product:
        with self._lock:
            new_id = self._last_id + 1
            product = Product(id=new_id, name=name, price=price)
            self._products.append(product)
            self._last_id = new_id
            return product

    def replace(self, product_id: int, name: str, price: Decimal) -> Optional[Product]:
        with self._lock:
            for index, current in enumerate(self._products):
                if current.id == product_id:
                    updated = Product(id=product_id, name=name, price=price)
                    self._products[index] = updated
                    return updated
            return None

    def remove(self, product_id: int) -> bool:
        with self._lock:
            for index, current in enumerate(self._products):
                if current.id == product_id:
                    del self._products[index]
                    return True
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)
