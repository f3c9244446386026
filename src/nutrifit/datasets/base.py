# datasets/base.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_CLUSTER_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
# One row of the recipe catalog CSV, as it will be shown in a meal slot
class RecipeRecord:
    name: str
    calories: str                     # kept as text, the CSV mixes "250" and "250 kkal"
    type: str                         # dish type, e.g. 'Sarapan', 'Lauk'
    image: str                        # image file name or URL
    cluster: str                      # raw cell; may be present but not an integer

    @property
    def cluster_id(self) -> Optional[int]:
        """Parsed cluster, or None when the cell is not a plain integer."""
        if not isinstance(self.cluster, str):
            return None
        s = self.cluster.strip()
        # plain digits only; int() alone would also take "1_0"
        if not _CLUSTER_RE.fullmatch(s):
            return None
        return int(s)
