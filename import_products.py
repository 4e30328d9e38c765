#!/usr/bin/env python
"""
CSV Product Import Script

Seeds the UMKM Management API catalog from a CSV file.

Expected columns: name, price, stock_quantity, and optionally
description and min_stock_threshold.

Usage:
    python import_products.py data/products.csv
    python import_products.py data/products.csv --url http://localhost:8000
    python import_products.py data/products.csv --limit 100
"""
import argparse
import csv
import sys
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx


def normalize_price(price_str: str) -> str:
    """
    Normalize price to 2 decimal places.

    Raises:
        ValueError: if the price is not a positive number
    """
    try:
        price = Decimal(price_str.strip().replace(",", ""))
    except InvalidOperation as exc:
        raise ValueError(f"invalid price {price_str!r}") from exc

    price = price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if price <= 0:
        raise ValueError(f"price must be positive, got {price_str!r}")
    return str(price)


def csv_row_to_product(row: Dict[str, str]) -> Dict[str, Any]:
    """Convert a CSV row to a ``POST /products`` payload."""
    name = (row.get("name") or "").strip()[:256]
    if not name:
        raise ValueError("missing name")

    stock = int(row["stock_quantity"])
    if stock < 0:
        raise ValueError(f"stock_quantity must be non-negative, got {stock}")

    payload: Dict[str, Any] = {
        "name": name,
        "description": (row.get("description") or "").strip() or None,
        "price": normalize_price(row["price"]),
        "stock_quantity": stock,
    }
    threshold = (row.get("min_stock_threshold") or "").strip()
    if threshold:
        payload["min_stock_threshold"] = int(threshold)
    return payload


def read_csv_products(file_path: Path, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Read product payloads from a CSV file, skipping invalid rows."""
    products = []
    with open(file_path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for i, row in enumerate(reader):
            if limit and i >= limit:
                break
            try:
                products.append(csv_row_to_product(row))
            except (ValueError, KeyError) as e:
                print(f"Skipping row {i + 2}: {e}", file=sys.stderr)
    return products


def send_product(
    client: httpx.Client,
    product: Dict[str, Any],
    api_url: str,
) -> Dict[str, Any]:
    """
    Create one product through the API.

    Raises:
        httpx.HTTPError: If API request fails
    """
    response = client.post(f"{api_url}/products", json=product)
    response.raise_for_status()
    return response.json()


def main():
    """Main entry point for the script."""
    parser = argparse.ArgumentParser(
        description="Import products from CSV to the UMKM Management API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/products.csv
  %(prog)s data/products.csv --limit 100 --url http://localhost:8000
        """
    )
    parser.add_argument("csv_file", type=Path, help="Path to CSV file with product data")
    parser.add_argument(
        "--url",
        type=str,
        default="http://localhost:8000",
        help="Base API URL (default: http://localhost:8000)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of rows to import (default: all)"
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Request timeout in seconds (default: 30)"
    )
    args = parser.parse_args()

    if not args.csv_file.is_file():
        print(f"Error: File not found: {args.csv_file}", file=sys.stderr)
        sys.exit(1)

    products = read_csv_products(args.csv_file, args.limit)
    if not products:
        print("No valid products found in CSV", file=sys.stderr)
        sys.exit(1)

    print(f"Loaded {len(products)} product(s), sending to {args.url}")

    created = 0
    with httpx.Client(timeout=args.timeout) as client:
        for product in products:
            try:
                result = send_product(client, product, args.url)
            except httpx.HTTPStatusError as e:
                print(f"Failed to create {product['name']!r}: {e.response.text}", file=sys.stderr)
                sys.exit(1)
            except httpx.HTTPError as e:
                print(f"Failed to create {product['name']!r}: {e}", file=sys.stderr)
                sys.exit(1)
            created += 1
            print(f"   #{result['id']} {result['name']}")

    print(f"\nImport complete! Created {created} product(s)")


if __name__ == "__main__":
    main()
