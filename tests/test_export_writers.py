"""Tests for the JSON product export."""

import json
from pathlib import Path

from core.types import Product
from utils.export_writers import PRODUCT_JSON_COLUMNS, write_products_json


def _product(color: str) -> Product:
    return Product(
        title="Téléphone 64GB",
        price=99.99,
        imageUrl="https://example.com/images/t.png",
        capacityMB=64000.0,
        availabilityText="In Stock",
        isAvailable=True,
        shippingText="Delivers 2022-07-03",
        shippingDate="2022-07-03",
        color=color,
    )


def test_write_products_json(tmp_path: Path) -> None:
    output = write_products_json([_product("red"), _product("blue")], tmp_path / "out" / "products.json")

    raw = output.read_text(encoding="utf-8")
    data = json.loads(raw)

    assert output == tmp_path / "out" / "products.json"
    assert [row["color"] for row in data] == ["red", "blue"]
    assert [list(row) for row in data] == [list(PRODUCT_JSON_COLUMNS)] * 2
    assert data[0]["isAvailable"] is True
    assert "Téléphone" in raw
    assert list(tmp_path.joinpath("out").iterdir()) == [output]


def test_write_empty_list(tmp_path: Path) -> None:
    output = write_products_json([], tmp_path / "empty.json")

    assert json.loads(output.read_text(encoding="utf-8")) == []

