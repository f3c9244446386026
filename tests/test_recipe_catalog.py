import dataclasses
import io
import threading
import time
from unittest import mock

import pandas as pd
import pytest

from nutrifit.datasets.base import RecipeRecord
from nutrifit.datasets.recipe_catalog import RecipeCatalog
from nutrifit.errors import CatalogError, EmptyCatalogError

from conftest import HEADER, make_csv


def test_filter_by_cluster_keeps_source_order(catalog):
    names = [r.name for r in catalog.filter_by_cluster(1)]
    assert names == [f"Recipe {i}" for i in range(10)]


def test_filter_excludes_malformed_cluster_without_raising(catalog):
    assert all(r.name != "Broken" for c in (0, 1, 2) for r in catalog.filter_by_cluster(c))
    broken = [r for r in catalog if r.name == "Broken"]
    assert broken and broken[0].cluster_id is None


def test_filter_unknown_cluster_is_empty(catalog):
    assert catalog.filter_by_cluster(42) == []


def test_records_are_typed_and_immutable(catalog):
    first = catalog.records[0]
    assert first == RecipeRecord(name="Recipe 0", calories="100", type="Lauk", image="r0.jpg", cluster="1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.name = "changed"


def test_row_without_cluster_is_skipped_with_warning(caplog):
    src = io.StringIO(HEADER + "A,100,Lauk,a.jpg,1\nB,120,Sayur,b.jpg,\nC,130,Lauk,c.jpg,1\n")
    cat = RecipeCatalog(src).load()
    assert [r.name for r in cat] == ["A", "C"]
    assert any("cluster is empty" in rec.getMessage() for rec in caplog.records)


def test_short_row_is_skipped():
    src = io.StringIO(HEADER + "A,100,Lauk,a.jpg,1\nB,120,Sayur\n")
    assert [r.name for r in RecipeCatalog(src)] == ["A"]


def test_original_dataset_headers_are_accepted():
    src = io.StringIO("nama_makanan,kalori,jenis,image,cluster\nSoto Ayam,312,Makan Siang,soto.jpg,0\n")
    rec = RecipeCatalog(src).filter_by_cluster(0)[0]
    assert (rec.name, rec.calories, rec.type) == ("Soto Ayam", "312", "Makan Siang")


def test_column_order_is_irrelevant():
    src = io.StringIO("cluster,image,type,calories,name\n2,x.jpg,Lauk,99,Tempe\n")
    assert RecipeCatalog(src).filter_by_cluster(2)[0].name == "Tempe"


def test_missing_required_column_is_catalog_error():
    src = io.StringIO("name,calories,cluster\nA,100,1\n")
    with pytest.raises(CatalogError, match="image"):
        RecipeCatalog(src).load()


def test_missing_file_is_catalog_error(tmp_path):
    cat = RecipeCatalog(str(tmp_path / "nope.csv"))
    with pytest.raises(CatalogError) as ei:
        cat.load()
    assert not isinstance(ei.value, EmptyCatalogError)
    assert not cat.is_loaded


@pytest.mark.parametrize("text", ["", HEADER, HEADER + "A,1,Lauk,a.jpg,\n"])
def test_empty_source_is_distinct_error(text):
    with pytest.raises(EmptyCatalogError):
        RecipeCatalog(io.StringIO(text)).load()


def test_failed_load_is_not_cached(tmp_path):
    path = tmp_path / "recipes.csv"
    cat = RecipeCatalog(str(path))
    with pytest.raises(CatalogError):
        cat.load()
    path.write_text(make_csv([("A", 1, "Lauk", "a.jpg", 3)]), encoding="utf-8")
    assert [r.name for r in cat.load().filter_by_cluster(3)] == ["A"]


def test_load_is_cached_until_refresh(tmp_path):
    path = tmp_path / "recipes.csv"
    path.write_text(make_csv([("A", 1, "Lauk", "a.jpg", 1)]), encoding="utf-8")
    cat = RecipeCatalog(str(path))
    first = cat.load().records
    path.write_text(make_csv([("B", 2, "Lauk", "b.jpg", 1)]), encoding="utf-8")

    assert cat.load().records is first
    assert [r.name for r in cat.refresh()] == ["B"]


def test_concurrent_first_access_reads_once(cluster_one_rows):
    cat = RecipeCatalog(io.StringIO(make_csv(cluster_one_rows)))
    real_read_csv = pd.read_csv
    start = threading.Barrier(8)

    with mock.patch("nutrifit.datasets.recipe_catalog.pd.read_csv", side_effect=real_read_csv) as spy:
        def worker():
            start.wait()
            cat.filter_by_cluster(1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert spy.call_count == 1
    assert len(cat.filter_by_cluster(1)) == 10


def test_dump_logs_every_record(catalog, caplog):
    count = catalog.dump()
    assert count == len(catalog.records)
    lines = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Recipe ")]
    assert len(lines) == count
    assert lines[0].startswith("Recipe 1: Name=Recipe 0, Calories=100, Type=Lauk, Image=r0.jpg")


def test_load_within_times_out():
    cat = RecipeCatalog(io.StringIO(make_csv([("A", 1, "Lauk", "a.jpg", 1)])))

    def slow_read():
        time.sleep(0.5)
        return ()

    with mock.patch.object(cat, "_read_source", side_effect=slow_read):
        with pytest.raises(CatalogError, match="within"):
            cat.load_within(0.05)


def test_from_settings_uses_env(monkeypatch, tmp_path):
    path = tmp_path / "r.csv"
    monkeypatch.setenv("NUTRIFIT_RECIPES_CSV", str(path))
    assert RecipeCatalog.from_settings().source == str(path)


def test_trailing_comma_rows_keep_columns_aligned():
    src = io.StringIO(HEADER + "A,100,Lauk,a.jpg,1,\nB,120,Sayur,b.jpg,2,\n")
    cat = RecipeCatalog(src).load()
    assert [(r.name, r.calories, r.cluster_id) for r in cat] == [("A", "100", 1), ("B", "120", 2)]


@pytest.mark.parametrize(
    "cell,expected",
    [("3", 3), (" 2 ", 2), ("-1", -1), ("+4", 4), ("1_0", None), ("1.0", None), ("٣", None), ("", None)],
)
def test_cluster_id_accepts_plain_integers_only(cell, expected):
    assert RecipeRecord("A", "1", "Lauk", "a.jpg", cell).cluster_id == expected


def test_underscore_cluster_never_matches():
    src = io.StringIO(HEADER + "A,100,Lauk,a.jpg,1_0\nB,120,Sayur,b.jpg,10\n")
    assert [r.name for r in RecipeCatalog(src).filter_by_cluster(10)] == ["B"]


def test_failed_refresh_keeps_last_snapshot(tmp_path):
    path = tmp_path / "recipes.csv"
    path.write_text(make_csv([("A", 1, "Lauk", "a.jpg", 1)]), encoding="utf-8")
    cat = RecipeCatalog(str(path))
    first = cat.load().records

    path.write_text("", encoding="utf-8")
    with pytest.raises(EmptyCatalogError):
        cat.refresh()

    assert cat.is_loaded
    assert cat.records is first
    assert [r.name for r in cat.filter_by_cluster(1)] == ["A"]
