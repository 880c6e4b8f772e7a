#!/usr/bin/env python3
"""
Seed categories, subcategories and (optionally) products.

Products are read from a JSON file (a list, or an object with an "items"
list) and written through ProductService, so every seeded row satisfies the
same rules as an admin write: image_url mirrors images[0], blank skus are
stored as null, and a duplicate slug/sku is reported instead of aborting the
whole run.

Usage:
    python scripts/seed_catalogue.py
    python scripts/seed_catalogue.py --file ./catalogue.json --reset
"""
import argparse
import json
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pydantic import ValidationError

from storefront.db import SessionLocal, init_db
from storefront.models.category import Category, Subcategory
from storefront.schemas.product_schema import ProductCreate
from storefront.services.product_service import DuplicateValueError, ProductService
from storefront.utils.log import configure_logging

# category slug -> (name, [(subcategory slug, name), ...])
CATEGORY_TREE = {
    "garden": ("Garden", [("tools", "Tools"), ("seeds", "Seeds"), ("fertilizers", "Fertilizers"), ("other", "Other")]),
    "pets": ("Pets", [("toys", "Toys"), ("collars", "Collars"), ("hygiene", "Hygiene"), ("other", "Other")]),
    "hardware": ("Hardware", [("power-tools", "Power Tools"), ("hand-tools", "Hand Tools"), ("plumbing", "Plumbing"), ("other", "Other")]),
    "apparel": ("Apparel", [("boots", "Boots"), ("hats", "Hats"), ("belts", "Belts"), ("other", "Other")]),
}


def seed_categories(db) -> int:
    created = 0
    for slug, (name, subs) in CATEGORY_TREE.items():
        cat = db.query(Category).filter(Category.slug == slug).first()
        if not cat:
            cat = Category(slug=slug, name=name)
            db.add(cat)
            db.flush()
            created += 1
        existing = {s.slug for s in cat.subcategories}
        for sub_slug, sub_name in subs:
            if sub_slug not in existing:
                db.add(Subcategory(category_id=cat.category_id, slug=sub_slug, name=sub_name))
                created += 1
    db.commit()
    return created


def _normalize_entry(entry, db):
    """Map a loosely shaped JSON product onto ProductCreate fields."""
    data = dict(entry)
    data.setdefault("name", data.pop("title", None))
    data.setdefault("stock", data.pop("quantity", 0))
    if "originalPrice" in data:
        data.setdefault("original_price", data.pop("originalPrice"))

    # categories may be referenced by slug instead of id
    cat_slug = data.pop("category", None)
    sub_slug = data.pop("subcategory", None)
    if cat_slug and not data.get("category_id"):
        cat = db.query(Category).filter(Category.slug == cat_slug).first()
        if cat:
            data["category_id"] = cat.category_id
            if sub_slug and not data.get("subcategory_id"):
                sub = next((s for s in cat.subcategories if s.slug == sub_slug), None)
                data["subcategory_id"] = sub.subcategory_id if sub else None
    return data


def seed_products(path: str, db) -> int:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        source_list = data.get("items") if isinstance(data.get("items"), list) else list(data.values())
    elif isinstance(data, list):
        source_list = data
    else:
        source_list = []

    svc = ProductService(db)
    created = 0
    for entry in source_list:
        try:
            svc.create(ProductCreate(**_normalize_entry(entry, db)))
            created += 1
        except ValidationError as e:
            print(f"Skipping invalid entry {entry.get('slug')!r}: {e.error_count()} error(s)")
        except DuplicateValueError as e:
            print(f"Skipping {entry.get('slug')!r}: duplicate {e.field}")
    return created


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=None, help="Path to a product JSON file")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate tables first")
    args = parser.parse_args()

    configure_logging("INFO")
    if args.file and not os.path.exists(args.file):
        print("File not found:", args.file)
        sys.exit(1)

    init_db(reset=args.reset)
    db = SessionLocal()
    try:
        print("Seeded categories/subcategories:", seed_categories(db))
        if args.file:
            print("Seeded products:", seed_products(args.file, db))
    finally:
        db.close()
