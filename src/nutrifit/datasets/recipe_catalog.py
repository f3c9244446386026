# datasets/recipe_catalog.py

"""
What this does:
1. Reads the cluster-tagged recipe CSV (name, calories, type, image, cluster) with pandas.
2. Matches columns by header using synonym sets, so the original dataset headers
   (nama_makanan, kalori, jenis) load the same way as the English ones.
3. Produces immutable RecipeRecord objects in source order and caches them for the session.
4. Serves filter_by_cluster(cluster_id) for the recommendation engine.

Rows without a cluster cell are skipped with a warning. Rows whose cluster is
present but not an integer are kept, and simply never match a cluster filter.
"""


from __future__ import annotations

import io
import os
import threading
from typing import Dict, Iterator, List, Optional, TextIO, Tuple, Union

import pandas as pd

from nutrifit.concurrency import CallTimedOut, call_with_timeout
from nutrifit.datasets.base import RecipeRecord
from nutrifit.errors import CatalogError, EmptyCatalogError
from nutrifit.logging_utils import get_logger

logger = get_logger("recipe_catalog")

CatalogSource = Union[str, "os.PathLike[str]", TextIO]


def _normalize_col_name(col: str) -> str:
    """
    Normalize column names so we can match them across dataset exports.
    Examples:
      "Nama Makanan" -> "nama_makanan"
      " Cluster " -> "cluster"
    """
    c = str(col).strip().lstrip("\ufeff").lower()
    for ch in [" ", "-", ".", "(", ")"]:
        c = c.replace(ch, "_")
    while "__" in c:
        c = c.replace("__", "_")
    return c.strip("_")


# Canonical field synonym sets (normalized)
NAME_COLS = {"name", "nama_makanan", "recipe_name", "title"}
CALORIES_COLS = {"calories", "kalori", "kcal"}
TYPE_COLS = {"type", "jenis", "dish_type"}
IMAGE_COLS = {"image", "image_url", "gambar"}
CLUSTER_COLS = {"cluster", "cluster_id"}

REQUIRED_FIELDS: Dict[str, set] = {
    "name": NAME_COLS,
    "calories": CALORIES_COLS,
    "type": TYPE_COLS,
    "image": IMAGE_COLS,
}


def _find_col(norm_to_orig: Dict[str, str], candidates: set) -> Optional[str]:
    """
    Given a mapping of normalized -> original column names, return the original
    name for the first candidate that exists.
    """
    for cand in sorted(candidates):
        if cand in norm_to_orig:
            return norm_to_orig[cand]
    return None


def _cell(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


class RecipeCatalog:
    """Lazily loaded, read-only snapshot of the recipe CSV."""

    def __init__(self, source: CatalogSource) -> None:
        self.source = source
        self._records: Optional[Tuple[RecipeRecord, ...]] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings=None) -> "RecipeCatalog":
        if settings is None:
            from nutrifit.config import get_settings

            settings = get_settings()
        return cls(settings.recipes_csv)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    def load(self) -> "RecipeCatalog":
        """
        Read the source once and cache the records.

        Safe under concurrent first access: only one thread reads, the rest
        wait on the lock and reuse the snapshot. A failed load caches nothing.

        Raises:
            CatalogError: unreadable source or missing required columns.
            EmptyCatalogError: readable source with no usable rows.
        """
        if self._records is not None:
            return self
        with self._lock:
            if self._records is None:
                self._records = self._read_source()
        return self

    def load_within(self, timeout: Optional[float]) -> "RecipeCatalog":
        """Time-bounded load(); an overrun raises CatalogError."""
        try:
            return call_with_timeout(self.load, timeout)
        except CallTimedOut as exc:
            raise CatalogError(f"recipe source not loaded within {timeout}s") from exc

    def refresh(self) -> "RecipeCatalog":
        """Read the source again and swap the new snapshot in."""
        with self._lock:
            # Keep the last good snapshot if the re-read fails
            records = self._read_source()
            self._records = records
        return self

    @property
    def records(self) -> Tuple[RecipeRecord, ...]:
        records = self._records
        if records is None:
            records = self.load()._records
        return records  # type: ignore[return-value]

    def filter_by_cluster(self, cluster_id: int) -> List[RecipeRecord]:
        """Records tagged with cluster_id, in source order."""
        return [r for r in self.records if r.cluster_id == cluster_id]

    def dump(self) -> int:
        """
        Diagnostic read: log every record and return how many there are.

        Not part of the recommendation path; meant for operators checking a
        freshly deployed CSV.
        """
        records = self.records
        for index, recipe in enumerate(records, start=1):
            logger.info(
                "Recipe %d: Name=%s, Calories=%s, Type=%s, Image=%s, Cluster=%s",
                index,
                recipe.name,
                recipe.calories,
                recipe.type,
                recipe.image,
                recipe.cluster,
            )
        return len(records)

    def __iter__(self) -> Iterator[RecipeRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read_frame(self) -> pd.DataFrame:
        source = self.source
        if isinstance(source, io.IOBase) and source.seekable():
            source.seek(0)
        try:
            return pd.read_csv(
                source,
                dtype=str,
                index_col=False,        # trailing commas must not turn "name" into the index
                keep_default_na=False,
                encoding="utf-8",
                skip_blank_lines=True,
                on_bad_lines="warn",
            )
        except pd.errors.EmptyDataError as exc:
            raise EmptyCatalogError(f"recipe source {self._label()} is empty") from exc
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
            logger.error(
                "Could not read recipe source %s",
                self._label(),
                exc_info=True,
                extra={
                    "invoking_func": "RecipeCatalog._read_frame",
                    "invoking_purpose": "Read recipe CSV into a DataFrame",
                    "next_step": "Raise CatalogError",
                    "resolution": "Check NUTRIFIT_RECIPES_CSV path, encoding (UTF-8) and delimiter",
                },
            )
            raise CatalogError(f"recipe source {self._label()} is unreadable: {exc}") from exc

    def _read_source(self) -> Tuple[RecipeRecord, ...]:
        df = self._read_frame()

        norm_to_orig = {_normalize_col_name(c): c for c in df.columns}
        cols = {field: _find_col(norm_to_orig, cands) for field, cands in REQUIRED_FIELDS.items()}
        missing = sorted(field for field, col in cols.items() if col is None)
        if missing:
            raise CatalogError(
                f"recipe source {self._label()} is missing columns {missing}. "
                f"Available columns: {list(df.columns)}"
            )

        cluster_col = _find_col(norm_to_orig, CLUSTER_COLS)
        if cluster_col is None:
            logger.warning(
                "Recipe source %s has no cluster column; every row will be skipped",
                self._label(),
                extra={
                    "invoking_func": "RecipeCatalog._read_source",
                    "invoking_purpose": "Map CSV rows to RecipeRecord",
                    "next_step": "Skip all rows",
                    "resolution": "Add a 'cluster' column to the recipe CSV",
                },
            )

        records: List[RecipeRecord] = []
        skipped = 0
        for row_no, row in enumerate(df.to_dict(orient="records"), start=2):
            cluster = _cell(row.get(cluster_col)) if cluster_col is not None else ""
            if not cluster:
                skipped += 1
                if cluster_col is not None:
                    logger.warning(
                        "Skipping line %d (%s): cluster is empty",
                        row_no,
                        _cell(row.get(cols["name"])),
                        extra={
                            "invoking_func": "RecipeCatalog._read_source",
                            "invoking_purpose": "Map CSV rows to RecipeRecord",
                            "next_step": "Continue with the next row",
                            "resolution": "Fill in the cluster for this recipe",
                        },
                    )
                continue
            records.append(
                RecipeRecord(
                    name=_cell(row.get(cols["name"])),
                    calories=_cell(row.get(cols["calories"])),
                    type=_cell(row.get(cols["type"])),
                    image=_cell(row.get(cols["image"])),
                    cluster=cluster,
                )
            )

        if not records:
            raise EmptyCatalogError(
                f"recipe source {self._label()} has no usable rows ({skipped} skipped)"
            )

        logger.info(
            "Loaded %d recipes from %s (%d skipped)",
            len(records),
            self._label(),
            skipped,
            extra={
                "invoking_func": "RecipeCatalog.load",
                "invoking_purpose": "Cache recipe catalog for the session",
                "next_step": "Serve filter_by_cluster from memory",
                "resolution": "",
            },
        )
        return tuple(records)

    def _label(self) -> str:
        if isinstance(self.source, (str, os.PathLike)):
            return os.fspath(self.source)
        return f"<{type(self.source).__name__}>"
