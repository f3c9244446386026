"""
Purpose:
    Diagnostic read of the recipe catalog CSV: loads it exactly the way the
    recommender does and logs one line per recipe.

Usage:
    python scripts/dump_catalog.py
    python scripts/dump_catalog.py --csv data/recipes.csv --cluster 1

Output: Expected Output in CLI Run (one structured log line per recipe)
    ...|Recipe 1: Name=Bubur Ayam, Calories=372, Type=Sarapan, Image=bubur_ayam.jpg, Cluster=1|...
    ...
    17 usable recipes
    - cluster 0: 3
    - cluster 1: 10
    - cluster 2: 4
    cluster 1 -> 10 recipes
"""
from __future__ import annotations

import argparse
from collections import Counter

from nutrifit.config import get_settings
from nutrifit.datasets.recipe_catalog import RecipeCatalog
from nutrifit.errors import CatalogError
from nutrifit.logging_utils import get_logger

logger = get_logger("dump_catalog")


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--csv", default=None, help="Override NUTRIFIT_RECIPES_CSV")
    ap.add_argument("--cluster", type=int, default=None, help="Also show how many recipes match this cluster")
    args = ap.parse_args()

    catalog = RecipeCatalog(args.csv or get_settings().recipes_csv)
    try:
        count = catalog.dump()
    except CatalogError as exc:
        logger.error(
            "No data found in the recipe CSV: %s",
            exc,
            extra={
                "invoking_func": "main",
                "invoking_purpose": "Dump recipe catalog",
                "next_step": "Exit",
                "resolution": "Fix the CSV path or contents",
            },
        )
        return 1

    per_cluster = Counter(r.cluster_id for r in catalog)
    print(f"{count} usable recipes")
    for cluster_id, n in sorted(per_cluster.items(), key=lambda kv: (kv[0] is None, kv[0] or 0)):
        label = "unparseable" if cluster_id is None else f"cluster {cluster_id}"
        print(f"- {label}: {n}")
    if args.cluster is not None:
        print(f"cluster {args.cluster} -> {len(catalog.filter_by_cluster(args.cluster))} recipes")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
