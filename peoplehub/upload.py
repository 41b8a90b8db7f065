# peoplehub/upload.py

import argparse
import io
import logging
import re

import numpy as np
import pandas as pd
from pydantic import ValidationError
from sqlmodel import Session, delete

from peoplehub.database import engine as default_engine, init_db
from peoplehub.schema import DATE_COLUMNS, RISK_COLUMNS, normalize_dataframe, required_columns
from peoplehub.store import model_for

logger = logging.getLogger(__name__)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def detect_separator(text: str) -> str:
    """Exports are semicolon separated; hand-made files usually use commas."""
    header = text.split("\n", 1)[0]
    return ";" if header.count(";") >= header.count(",") and ";" in header else ","


def read_csv_bytes(contents: bytes) -> pd.DataFrame:
    text = contents.decode("utf-8-sig")
    # Everything as text: id numbers keep their leading zeros, coercion happens per column
    return pd.read_csv(io.StringIO(text), sep=detect_separator(text), dtype=str, keep_default_na=False)


def to_iso_date(value):
    """ISO strings pass through; anything else is parsed day-first (dd/mm/yyyy)."""
    if value is None or pd.isna(value):
        return None
    value = str(value).strip()
    if ISO_DATE.match(value):
        parsed = pd.to_datetime(value[:10], format="%Y-%m-%d", errors="coerce")
    else:
        parsed = pd.to_datetime(value, dayfirst=True, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.strftime("%Y-%m-%d")


def clean_dataframe(df: pd.DataFrame, collection: str) -> pd.DataFrame:
    logger.info("Cleaning %d %s rows", len(df), collection)

    # --- Dates → YYYY-MM-DD ---
    for col in DATE_COLUMNS:
        if col in df.columns:
            df[col] = df[col].apply(to_iso_date)

    # --- Risk scores: integers 0-5, anything else is unknown ---
    for col in RISK_COLUMNS:
        if col in df.columns:
            scores = pd.to_numeric(df[col], errors="coerce").round(0)
            invalid = scores.notna() & ((scores < 0) | (scores > 5))
            if invalid.any():
                logger.info("  %s: %d values outside 0-5 set to null", col, int(invalid.sum()))
            df[col] = scores.where(~invalid).astype("Int64")

    # --- Cost: zero or negative means no cost on file ---
    if "cost" in df.columns:
        df["cost"] = df["cost"].where(df["cost"] > 0)

    # --- Required fields ---
    required = [c for c in required_columns(collection) if c in df.columns]
    before = len(df)
    df = df.dropna(subset=required)
    if len(df) < before:
        logger.info("  Dropped %d rows missing %s", before - len(df), required)

    # --- Duplicate ids ---
    if "id" in df.columns:
        before = len(df)
        has_id = df["id"].notna()
        df = df[~(has_id & df["id"].duplicated(keep="first"))]
        if len(df) < before:
            logger.info("  Removed %d duplicate ids", before - len(df))

    logger.info("Cleaning done. %d rows ready.", len(df))
    return df


def validate_data_quality(df: pd.DataFrame, collection: str, rows_read: int) -> dict:
    warnings = []
    errors   = []

    total = len(df)
    if total == 0:
        errors.append("No usable rows after cleaning. Check the file's headers and separator.")
        return {"warnings": warnings, "errors": errors, "passed": False}

    dropped = rows_read - total
    if dropped > 0:
        warnings.append(f"{dropped} of {rows_read} rows were dropped (missing required fields or duplicates).")

    if collection != "employees":
        return {"warnings": warnings, "errors": errors, "passed": True}

    # Cost coverage drives every cost and salary chart
    if "cost" in df.columns:
        missing_cost = int(df["cost"].isna().sum())
        if missing_cost > total * 0.30:
            warnings.append(
                f"{missing_cost} employees have no cost. "
                f"They are left out of cost and salary charts."
            )

    for col in ("unit_criticality", "attrition_risk"):
        if col in df.columns:
            missing = int(df[col].isna().sum())
            if missing > total * 0.30:
                warnings.append(f"{missing} employees have no {col}. Their attention score is 0.")

    if "id_number" in df.columns:
        repeated = int(df["id_number"].dropna().duplicated().sum())
        if repeated > 0:
            warnings.append(f"{repeated} id numbers appear more than once.")

    if "start_date" in df.columns:
        today = pd.Timestamp.today().strftime("%Y-%m-%d")
        future = int((df["start_date"].dropna() > today).sum())
        if future > 0:
            warnings.append(f"{future} employees have a start date in the future.")

    return {"warnings": warnings, "errors": errors, "passed": len(errors) == 0}


def _python_value(value):
    if isinstance(value, (str, bool)):
        return value
    if value is None or pd.isna(value):
        return None
    if isinstance(value, np.generic):
        return value.item()
    return value


def ingest_from_dataframe(df: pd.DataFrame, collection: str, engine=None) -> dict:
    """Replace every row of the collection with the dataframe's rows."""
    model = model_for(collection)
    records = []
    skipped = 0

    for row in df.to_dict(orient="records"):
        values = {name: _python_value(value) for name, value in row.items()}
        values = {name: value for name, value in values.items() if value is not None}
        try:
            records.append(model.model_validate(values))
        except ValidationError as e:
            logger.warning("Skipping bad %s row: %s", collection, e.errors()[0].get("msg"))
            skipped += 1

    with Session(engine or default_engine) as session:
        session.exec(delete(model))
        session.add_all(records)
        session.commit()

    logger.info("Ingested %d %s rows. Skipped: %d", len(records), collection, skipped)
    return {"ingested": len(records), "skipped": skipped}


def import_csv(path: str, collection: str, engine=None) -> dict:
    """Normalize, clean, check and ingest one exported CSV file."""
    with open(path, "rb") as f:
        df = read_csv_bytes(f.read())

    rows_read = len(df)
    df, schema_report = normalize_dataframe(df, collection)

    missing_required = [col for col in required_columns(collection) if col not in df.columns]
    if missing_required:
        raise ValueError(f"Missing required columns: {missing_required}")

    df = clean_dataframe(df, collection)
    quality = validate_data_quality(df, collection, rows_read)
    if not quality["passed"]:
        raise ValueError("; ".join(quality["errors"]))

    result = ingest_from_dataframe(df, collection, engine)
    return {**result, "schema": schema_report, "warnings": quality["warnings"]}


# Lookup tables first, so employee references resolve as soon as employees land
IMPORT_ORDER = [
    "branches", "employing_companies", "seniority_levels", "leaving_reasons",
    "job_roles", "projects", "performance_levels", "employees",
]


def main(argv=None):
    from peoplehub.config import get_settings
    from peoplehub.logging_config import setup_logging

    parser = argparse.ArgumentParser(description="Import an exported CSV into one collection.")
    parser.add_argument("collection", choices=IMPORT_ORDER)
    parser.add_argument("path")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)

    init_db()
    result = import_csv(args.path, args.collection)
    for warning in result["warnings"]:
        logger.warning(warning)


if __name__ == "__main__":
    main()
