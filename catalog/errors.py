# catalog/errors.py
from typing import Optional


class CatalogError(Exception):
    """Base class for failures raised by the catalog core."""


class ProductNotFound(CatalogError, KeyError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(product_id)

    def __str__(self) -> str:
        return f"product not found: {self.product_id}"


class InvariantViolation(CatalogError, RuntimeError):
    """The category index and the record store disagree about an id.

    This is a defect in the write discipline, not a runtime condition the
    caller can recover from.
    """

    def __init__(self, message: str, product_id: Optional[int] = None, category: Optional[str] = None):
        self.product_id = product_id
        self.category = category
        super().__init__(message)
