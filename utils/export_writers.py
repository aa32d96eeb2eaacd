from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Tuple, Union

from core.types import Product

logger = logging.getLogger(__name__)

__all__ = ["write_products_json", "PRODUCT_JSON_COLUMNS"]

PRODUCT_JSON_COLUMNS: Tuple[str, ...] = (
    "title",
    "price",
    "imageUrl",
    "capacityMB",
    "availabilityText",
    "isAvailable",
    "shippingText",
    "shippingDate",
    "color",
)


def write_products_json(
    products: Iterable[Product], path: Union[str, Path] = "output.json"
) -> Path:
    """Write products as a pretty-printed JSON array.

    The file is written to a temporary sibling first and moved into place.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rows = [product.to_dict(PRODUCT_JSON_COLUMNS) for product in products]
    payload = json.dumps(rows, ensure_ascii=False, indent=4)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Wrote %d products to %s", len(rows), path)
    return path
