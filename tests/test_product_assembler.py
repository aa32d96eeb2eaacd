"""Tests for assembling, expanding and de-duplicating products."""

from pathlib import Path

import pytest

from core.deduplicator import dedupe_products
from core.field_classifier import AvailabilityClassifier
from core.product_assembler import ProductAssembler
from core.training import load_validation_training
from core.types import Product, RawField
from utils.error_handling import ExtractionError, MissingFieldError
from utils.normalizers import format_storage

TRAINING_DIR = Path(__file__).resolve().parent.parent / "training"
BASE_URL = "https://example.com/shop/phones"


@pytest.fixture(scope="module")
def assembler() -> ProductAssembler:
    classifier = AvailabilityClassifier(
        load_validation_training(TRAINING_DIR / "validation" / "availability.json")
    )
    return ProductAssembler(classifier, BASE_URL)


def _fields(**values):
    return {label: RawField(text, label) for label, text in values.items()}


def _product(title="Phone 128GB", price=199.99, color="red") -> Product:
    return Product(
        title=title,
        price=price,
        imageUrl="",
        capacityMB=128000.0,
        availabilityText="",
        isAvailable=False,
        shippingText="",
        shippingDate="",
        color=color,
    )


class TestProductAssembler:
    def test_expands_colour_variants(self, assembler: ProductAssembler) -> None:
        products = assembler.assemble(
            _fields(
                title="Phone",
                price="$199.99",
                storage="128GB",
                image=["../images/phone.png", "../images/phone-back.png"],
                availability="Availability: In Stock",
                delivery="Order within 6 hours and have it Tuesday 5th Jul 2022",
                color=["Red", "Blue"],
            )
        )

        assert [product.color for product in products] == ["red", "blue"]
        red, blue = products
        assert red.to_dict(["title", "price"]) == {"title": "Phone 128GB", "price": 199.99}
        assert red.capacityMB == format_storage("128GB", "MB") == 128000
        assert red.imageUrl == "https://example.com/shop/images/phone.png"
        assert red.availabilityText == "In Stock"
        assert red.isAvailable is True
        assert red.shippingText == "Order within 6 hours and have it Tuesday 5th Jul 2022"
        assert red.shippingDate == "2022-07-05"

        shared = {key: value for key, value in red.to_dict().items() if key != "color"}
        assert shared == {key: value for key, value in blue.to_dict().items() if key != "color"}

    def test_optional_fields_default(self, assembler: ProductAssembler) -> None:
        (product,) = assembler.assemble(
            _fields(title="Phone", price="£10", storage="64 GB", color=["Black"])
        )

        assert product.title == "Phone 64GB"
        assert product.imageUrl == ""
        assert product.availabilityText == ""
        assert product.shippingText == ""
        assert product.shippingDate == ""

    def test_out_of_stock(self, assembler: ProductAssembler) -> None:
        (product,) = assembler.assemble(
            _fields(
                title="Phone",
                price="£10",
                storage="64GB",
                availability="Availability: Out of Stock",
                color=["Black"],
            )
        )

        assert product.availabilityText == "Out of Stock"
        assert product.isAvailable is False

    def test_missing_colour_emits_nothing(self, assembler: ProductAssembler) -> None:
        assert assembler.assemble(_fields(title="Phone", price="$1", storage="1GB")) == []
        assert assembler.assemble(_fields(title="Phone", price="$1", color=[])) == []

    @pytest.mark.parametrize("missing", ["title", "price"])
    def test_missing_required_field(self, assembler: ProductAssembler, missing: str) -> None:
        values = dict(title="Phone", price="$1", storage="1GB", color=["Red"])
        del values[missing]

        with pytest.raises(MissingFieldError) as excinfo:
            assembler.assemble(_fields(**values))

        assert excinfo.value.label == missing
        assert isinstance(excinfo.value, ExtractionError)

    def test_blank_title_is_missing(self, assembler: ProductAssembler) -> None:
        with pytest.raises(MissingFieldError, match="title"):
            assembler.assemble(_fields(title=" ", price="$1", color=["Red"]))

    def test_list_valued_title(self, assembler: ProductAssembler) -> None:
        (product,) = assembler.assemble(
            _fields(title=["Phone", "ignored"], price="$5", color=["Red"])
        )

        assert product.title == "Phone"
        assert product.capacityMB == 0


class TestDeduplicator:
    def test_keeps_first_seen(self) -> None:
        first = _product()
        duplicate = Product(**{**_product().to_dict(), "shippingText": "later"})
        other_colour = _product(color="blue")
        other_price = _product(price=10.0)

        result = dedupe_products([first, other_colour, duplicate, other_price])

        assert result == [first, other_colour, other_price]
        assert result[0].shippingText == ""

    def test_idempotent(self) -> None:
        products = [_product(), _product(color="blue"), _product(), _product(title="Other")]

        once = dedupe_products(products)

        assert dedupe_products(once) == once
        assert len({product.dedupe_key() for product in once}) == len(once)

    def test_empty(self) -> None:
        assert dedupe_products([]) == []


def test_product_to_dict_key_order() -> None:
    assert list(_product().to_dict()) == [
        "title",
        "price",
        "imageUrl",
        "capacityMB",
        "availabilityText",
        "isAvailable",
        "shippingText",
        "shippingDate",
        "color",
    ]
