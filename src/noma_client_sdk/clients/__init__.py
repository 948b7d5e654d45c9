from .auth import AuthClient
from .base import BaseClient
from .noma import NomaClient
from .product import ProductClient

__all__ = ["AuthClient", "BaseClient", "NomaClient", "ProductClient"]
