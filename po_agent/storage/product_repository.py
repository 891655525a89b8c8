"""po_agent.storage.product_repository

Loads the supported-product catalog from `data/products.json`.

The repository is built once at startup and injected into the tools that need it.

File layout:
  {"products": [{sku, name, description, cost, imageUrl?, isAvailable, baseSpecs, upgradeProfile?}],
   "upgradeProfiles": {"<profile>": [{type, to, costDelta}]}}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Optional

from po_agent.contracts.models import BaseSpecs, Product, UpgradeOption
from po_agent.contracts.tool_base import ProductRepository
from po_agent.errors import ConfigError
from po_agent.paths import default_catalog_path


def _product_from_dict(obj: dict[str, Any], profiles: dict[str, list[dict[str, Any]]]) -> Product:
    specs = obj.get("baseSpecs")
    upgrades = obj.get("upgradeOptions")
    if upgrades is None:
        upgrades = profiles.get(str(obj.get("upgradeProfile", "")), [])
    return Product(
        sku=str(obj["sku"]),
        name=str(obj.get("name", "")),
        description=str(obj.get("description", "")),
        cost=float(obj.get("cost", 0.0)),
        image_url=obj.get("imageUrl"),
        is_available=bool(obj.get("isAvailable", True)),
        base_specs=BaseSpecs(
            ram=str(specs.get("ram", "")),
            storage=str(specs.get("storage", "")),
            cpu=str(specs.get("cpu", "")),
        ) if isinstance(specs, dict) else None,
        upgrade_options=[
            UpgradeOption(type=str(u["type"]), to=str(u["to"]), cost_delta=float(u.get("costDelta", 0)))
            for u in upgrades
        ],
    )


class JsonProductRepository(ProductRepository):
    """Read-only catalog held in memory."""

    def __init__(self, products: list[Product]):
        self._products = list(products)

    @classmethod
    def from_file(cls, path: Optional[str] = None) -> "JsonProductRepository":
        p = Path(path) if path else default_catalog_path()
        if not p.exists():
            raise ConfigError(f"Product catalog not found: {p}")
        obj = json.loads(p.read_text(encoding="utf-8"))
        profiles = obj.get("upgradeProfiles", {})
        return cls([_product_from_dict(item, profiles) for item in obj.get("products", [])])

    def get_by_skus(self, skus: Iterable[str]) -> list[Product]:
        wanted = {s.strip().lower() for s in skus if s}
        return [p.summary() for p in self._products if p.sku.lower() in wanted]

    def get_all(self) -> list[Product]:
        return list(self._products)

    def get_summary_view(self) -> list[Product]:
        return [p.summary() for p in self._products]
