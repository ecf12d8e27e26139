"""Catalog Index: read-only lookup from product/variant ids to priced attributes.

The catalogue is owned elsewhere and handed to the storefront at start-up as
JSON. Carts never store prices; the effective unit price of a product variant
(``base_price + price_adjustment``) is resolved from the index on every access
so that a replaced catalogue is picked up immediately.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Variant:
    id: str
    color: str
    price_adjustment: float = 0.0
    image_url: str | None = None
    sizes: tuple[str, ...] = ()


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    base_price: float
    category: str | None = None
    tags: tuple[str, ...] = ()
    rating: float | None = None
    variants: tuple[Variant, ...] = field(default_factory=tuple)

    def variant(self, variant_id) -> Variant | None:
        return next((v for v in self.variants if v.id == str(variant_id)), None)


class CatalogIndex:
    """Immutable product index keyed by product id."""

    def __init__(self, products=()) -> None:
        self._products: dict[str, Product] = {p.id: p for p in products}

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self):
        return iter(self._products.values())

    def product(self, product_id) -> Product | None:
        return self._products.get(str(product_id))

    def resolve(self, product_id, variant_id) -> tuple[Product, Variant] | None:
        """Return the (product, variant) pair, or None when either is gone."""
        product = self.product(product_id)
        if product is None:
            return None
        variant = product.variant(variant_id)
        if variant is None:
            return None
        return product, variant

    def unit_price(self, product_id, variant_id) -> float | None:
        resolved = self.resolve(product_id, variant_id)
        if resolved is None:
            return None
        product, variant = resolved
        return product.base_price + variant.price_adjustment

    # -------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------
    @classmethod
    def from_records(cls, records) -> "CatalogIndex":
        """Build an index from product dicts.

        Accepts the storefront's original camelCase keys (``price``,
        ``priceAdjustment``, ``imageUrl``, ``size``) as well as snake_case.
        """
        return cls(_product_from_record(record) for record in records)

    @classmethod
    def from_json_file(cls, path: Path) -> "CatalogIndex":
        with open(path, encoding="utf-8") as fp:
            records = json.load(fp)
        index = cls.from_records(records)
        logger.info("Catalogue loaded", path=str(path), product_count=len(index))
        return index


def _pick(record, *keys, default=None):
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _variant_from_record(record) -> Variant:
    sizes = _pick(record, "sizes", "size", default=[]) or []
    return Variant(
        id=str(record["id"]),
        color=_pick(record, "color", default=""),
        price_adjustment=float(_pick(record, "price_adjustment", "priceAdjustment", default=0.0)),
        image_url=_pick(record, "image_url", "imageUrl"),
        sizes=tuple(str(s) for s in sizes),
    )


def _product_from_record(record) -> Product:
    rating = _pick(record, "rating")
    return Product(
        id=str(record["id"]),
        name=_pick(record, "name", default=""),
        base_price=float(_pick(record, "base_price", "basePrice", "price", default=0.0)),
        category=_pick(record, "category"),
        tags=tuple(_pick(record, "tags", default=[]) or []),
        rating=float(rating) if rating is not None else None,
        variants=tuple(_variant_from_record(v) for v in _pick(record, "variants", default=[]) or []),
    )
