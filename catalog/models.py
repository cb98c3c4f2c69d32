# catalog/models.py
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class SortKey(str, Enum):
    CATEGORY = "category"

    def key(self, product: "Product"):
        # id breaks ties so the order is total
        return (getattr(product, self.value), product.id)


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    category: str
    name: str


class ProductIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class ProductPage(BaseModel):
    items: List[Product]
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int


class CategoryList(BaseModel):
    categories: List[str]
