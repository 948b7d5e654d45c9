from __future__ import annotations

from dataclasses import dataclass

from ..models import Product
from .base import BaseClient


@dataclass
class ProductClient(BaseClient):
    async def get_product(self, code: str) -> Product:
        data = await self._request(
            "GET",
            f"/api/core/v1/product/{code}",
            with_auth=False,
            operation="get_product",
        )
        return Product.model_validate(data)
