"""Tests for the CSV product import script."""
import httpx
import pytest

from import_products import csv_row_to_product, normalize_price, read_csv_products, send_product


class TestRowConversion:
    """Tests for CSV row parsing."""

    def test_normalize_price_rounds_half_up(self):
        assert normalize_price("12.345") == "12.35"
        assert normalize_price("1,250.5") == "1250.50"

    def test_normalize_price_rejects_non_positive(self):
        with pytest.raises(ValueError):
            normalize_price("0")

    def test_row_with_optional_fields(self):
        row = {
            "name": " Kopi ",
            "price": "25.5",
            "stock_quantity": "12",
            "description": "",
            "min_stock_threshold": "4",
        }
        assert csv_row_to_product(row) == {
            "name": "Kopi",
            "description": None,
            "price": "25.50",
            "stock_quantity": 12,
            "min_stock_threshold": 4,
        }

    def test_row_without_threshold_omits_it(self):
        payload = csv_row_to_product({"name": "Teh", "price": "3", "stock_quantity": "0"})
        assert "min_stock_threshold" not in payload

    def test_row_rejects_negative_stock(self):
        with pytest.raises(ValueError):
            csv_row_to_product({"name": "Teh", "price": "3", "stock_quantity": "-1"})


def test_read_csv_skips_invalid_rows(tmp_path):
    csv_file = tmp_path / "products.csv"
    csv_file.write_text(
        "name,price,stock_quantity\n"
        "Gula,14.50,20\n"
        ",1.00,5\n"
        "Garam,abc,5\n"
        "Minyak,30.00,7\n",
        encoding="utf-8",
    )

    products = read_csv_products(csv_file)

    assert [p["name"] for p in products] == ["Gula", "Minyak"]


def test_read_csv_respects_limit(tmp_path):
    csv_file = tmp_path / "products.csv"
    csv_file.write_text("name,price,stock_quantity\nA,1,1\nB,1,1\nC,1,1\n", encoding="utf-8")

    assert len(read_csv_products(csv_file, limit=2)) == 2


def test_send_product_posts_to_products_endpoint():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(201, json={"id": 1, "name": "Gula"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        result = send_product(client, {"name": "Gula"}, "http://shop.local")

    assert seen["url"] == "http://shop.local/products"
    assert result["id"] == 1
