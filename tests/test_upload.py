"""
test_upload.py: CSV normalization, cleaning, quality checks and ingestion.
"""

import pandas as pd
import pytest

from peoplehub.schema import coerce_boolean, normalize_columns, normalize_dataframe
from peoplehub.store import RecordStore
from peoplehub.upload import (
    clean_dataframe,
    detect_separator,
    import_csv,
    ingest_from_dataframe,
    read_csv_bytes,
    to_iso_date,
    validate_data_quality,
)

EMPLOYEES_CSV = (
    "שם מלא;ת.ז;תאריך תחילת עבודה;עלות;קריטיות;סיכון עזיבה;דלת מסתובבת;עיר;עמודה לא מוכרת\n"
    "דנה כהן;012345678;10/03/2025;14000;4;3;true;חיפה;x\n"
    "אבי לוי;987654321;2024-11-01;;9;2;false;;y\n"
    ";111111111;2025-01-01;5000;1;1;;;z\n"
).encode("utf-8")

PROJECTS_CSV = "id,name,description\np1,אלפא,ראשון\np2,בטא,\n".encode("utf-8")


def cleaned(contents=EMPLOYEES_CSV, collection="employees"):
    df, report = normalize_dataframe(read_csv_bytes(contents), collection)
    return clean_dataframe(df, collection), report


class TestReading:

    def test_detect_separator(self):
        assert detect_separator("a;b;c\n1;2;3") == ";"
        assert detect_separator("a,b,c\n1,2,3") == ","

    def test_utf8_bom_and_leading_zeros(self):
        df = read_csv_bytes(b"\xef\xbb\xbf" + EMPLOYEES_CSV)
        assert df.columns[0] == "שם מלא"
        assert df.iloc[0]["ת.ז"] == "012345678"

    def test_iso_dates(self):
        assert to_iso_date("10/03/2025") == "2025-03-10"
        assert to_iso_date("2024-11-01T00:00:00") == "2024-11-01"
        assert to_iso_date("yesterday-ish") is None
        assert to_iso_date(None) is None


class TestNormalization:

    def test_hebrew_aliases(self):
        df = normalize_columns(pd.DataFrame(columns=["שם מלא", "עלות", "קריטיות"]), "employees")
        assert list(df.columns) == ["full_name", "cost", "unit_criticality"]

    def test_fuzzy_match(self):
        df = normalize_columns(pd.DataFrame(columns=["FullName", "Start-Date", "real market salary"]), "employees")
        assert list(df.columns) == ["full_name", "start_date", "real_market_salary"]

    def test_reference_tables_keep_name(self):
        df = normalize_columns(pd.DataFrame(columns=["שם", "תיאור"]), "projects")
        assert list(df.columns) == ["name", "description"]

    def test_unknown_columns_reported(self):
        _, report = normalize_dataframe(read_csv_bytes(EMPLOYEES_CSV), "employees")
        assert report["columns_ignored"] == ["עמודה לא מוכרת"]
        assert "full_name" in report["columns_found"]

    def test_booleans(self):
        assert coerce_boolean("true") is True
        assert coerce_boolean("FALSE") is False
        assert coerce_boolean("כן") is True
        assert coerce_boolean("maybe") is None
        assert coerce_boolean(None) is None

    def test_unknown_collection(self):
        with pytest.raises(ValueError):
            normalize_dataframe(pd.DataFrame(), "salaries")


class TestCleaning:

    def test_rows_without_name_dropped(self):
        df, _ = cleaned()
        assert list(df["full_name"]) == ["דנה כהן", "אבי לוי"]

    def test_values_coerced(self):
        df, _ = cleaned()
        first, second = df.iloc[0], df.iloc[1]
        assert first["start_date"] == "2025-03-10"
        assert first["cost"] == 14000.0
        assert bool(first["revolving_door"]) is True
        assert pd.isna(second["cost"])
        assert pd.isna(second["city"])

    def test_risk_outside_range_nulled(self):
        df, _ = cleaned()
        assert df.iloc[0]["unit_criticality"] == 4
        assert pd.isna(df.iloc[1]["unit_criticality"])

    def test_duplicate_ids_dropped(self):
        df, _ = cleaned("id,name\np1,אלפא\np1,כפול\n".encode("utf-8"), "projects")
        assert list(df["name"]) == ["אלפא"]

    def test_quality_report(self):
        df, _ = cleaned()
        quality = validate_data_quality(df, "employees", rows_read=3)
        assert quality["passed"] is True
        assert any("1 of 3 rows were dropped" in w for w in quality["warnings"])

    def test_no_usable_rows_fails(self):
        df, _ = cleaned(";".join(["שם מלא", "תאריך תחילת עבודה"]).encode("utf-8") + b"\n;\n")
        assert validate_data_quality(df, "employees", rows_read=1)["passed"] is False


class TestIngestion:

    def test_replaces_existing_rows(self, seeded_engine):
        df, _ = cleaned()
        result = ingest_from_dataframe(df, "employees", seeded_engine)
        assert result == {"ingested": 2, "skipped": 0}

        employees = RecordStore(seeded_engine).fetch_all("employees")
        assert sorted(e.full_name for e in employees) == ["אבי לוי", "דנה כהן"]
        dana = next(e for e in employees if e.full_name == "דנה כהן")
        assert dana.id_number == "012345678"
        assert dana.unit_criticality == 4
        assert dana.is_left is False

    def test_reference_ids_preserved(self, engine):
        df, _ = cleaned(PROJECTS_CSV, "projects")
        ingest_from_dataframe(df, "projects", engine)
        projects = {p.id: p for p in RecordStore(engine).fetch_all("projects")}
        assert projects["p1"].name == "אלפא"
        assert projects["p2"].description is None

    def test_import_csv_file(self, engine, tmp_path):
        path = tmp_path / "employees-export.csv"
        path.write_bytes(EMPLOYEES_CSV)
        result = import_csv(str(path), "employees", engine)
        assert result["ingested"] == 2
        assert result["schema"]["collection"] == "employees"

    def test_import_missing_required_column(self, engine, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_bytes("שם מלא;עיר\nדנה;חיפה\n".encode("utf-8"))
        with pytest.raises(ValueError):
            import_csv(str(path), "employees", engine)
