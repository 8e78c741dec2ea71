from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Union

from loguru import logger

from errors import NotFound, UnhandledFault, ValidationFailed
from models import Product, ProductStore

NAME_REQUIRED = "Name is required"
PRICE_NOT_POSITIVE = "Price must be greater than 0"

UPDATE_DEFAULT_NAME = ""
UPDATE_DEFAULT_PRICE = Decimal("0")


def validate_product_fields(name: Optional[str], price: Optional[Decimal]) -> Dict[str, List[str]]:
    """Collect every field violation, not just the first one."""
    errors: Dict[str, List[str]] = {}
    if name is None or not name.strip():
        errors.setdefault("name", []).append(NAME_REQUIRED)
    if price is None or price <= 0:
        errors.setdefault("price", []).append(PRICE_NOT_POSITIVE)
    return errors


class ProductHandler:
    """CRUD operations over a ProductStore.

    Failures come back as values (NotFound, ValidationFailed,
    UnhandledFault); nothing here knows about HTTP responses.
    """

    def __init__(self, store: ProductStore):
        self.store = store

    def list_products(self) -> List[Product]:
        logger.info("Fetching all products")
        return self.store.all()

    def get_product(self, product_id: int) -> Union[Product, NotFound]:
        logger.info(f"Fetching product {product_id}")
        product = self.store.find(product_id)
        if product is None:
            logger.warning(f"Product {product_id} not found")
            return NotFound(product_id, f"No product found with ID {product_id}")
        return product

    def create_product(
        self, name: Optional[str], price: Optional[Decimal]
    ) -> Union[Tuple[Product, str], ValidationFailed]:
        errors = validate_product_fields(name, price)
        if errors:
            logger.warning(f"Product creation rejected: {sorted(errors)}")
            return ValidationFailed(errors)

        product = self.store.add(name, price)
        logger.info(f"Product created with ID {product.id}")
        return product, f"/products/{product.id}"

    def update_product(
        self, product_id: int, name: Optional[str], price: Optional[Decimal]
    ) -> Union[Product, NotFound]:
        # Pas de validation des champs ici, contrairement à la création.
        # Un champ absent prend la valeur par défaut ("" ou 0).
        updated = self.store.replace(
            product_id,
            name if name is not None else UPDATE_DEFAULT_NAME,
            price if price is not None else UPDATE_DEFAULT_PRICE,
        )
        if updated is None:
            logger.warning(f"Product {product_id} not found for update")
            return NotFound(product_id, f"Cannot update. No product found with ID {product_id}")
        logger.info(f"Product {product_id} updated")
        return updated

    def delete_product(self, product_id: int) -> Optional[NotFound]:
        if not self.store.remove(product_id):
            logger.warning(f"Product {product_id} not found for deletion")
            return NotFound(product_id, f"Cannot delete. No product found with ID {product_id}")
        logger.info(f"Product {product_id} deleted")
        return None

    def simulate_failure(self) -> UnhandledFault:
        logger.error("Controlled error triggered", extra={"error_type": "controlled_500"})
        return UnhandledFault("Simulated server error")
