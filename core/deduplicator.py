"""De-duplication of assembled products."""

from typing import Iterable, List

from core.types import Product


def dedupe_products(products: Iterable[Product]) -> List[Product]:
    """Keep the first product per (title, price, color), preserving order."""
    seen = set()
    unique: List[Product] = []
    for product in products:
        key = product.dedupe_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(product)
    return unique
