# peoplehub/schema.py
#
# Normalizes exported CSVs before ingestion:
#   - Column name aliases (Hebrew UI headers, camelCase exports, snake_case)
#   - Value coercion (empty → null, "true"/"false" → bool, numerics)
#   - Schema report (which known columns arrived, which were ignored)

import pandas as pd

from peoplehub.store import COLLECTIONS

# ── Hard required per collection; upload fails without these ──
REQUIRED_COLUMNS = {
    "employees": ["full_name", "start_date"],
}
REFERENCE_REQUIRED = ["name"]

# ── Column name aliases ──
# Maps any known variation → canonical field name.
COLUMN_ALIASES = {
    # Identity
    "שם מלא":                 "full_name",
    "שם":                     "full_name",
    "Full Name":              "full_name",
    "Name":                   "full_name",
    "ת.ז":                    "id_number",
    "ת.ז.":                   "id_number",
    "תעודת זהות":             "id_number",
    "ID Number":              "id_number",

    # Org structure
    "פרויקט":                 "project_id",
    "סניף":                   "branch_id",
    "תפקיד":                  "job_role_id",
    "חברה מעסיקה":            "employing_company_id",
    "ותק":                    "seniority_level_id",
    "סיבת עזיבה":             "leaving_reason_id",
    "רמת ביצועים":            "performance_level_id",

    # Dates / location
    "תאריך תחילת עבודה":      "start_date",
    "Start Date":             "start_date",
    "תאריך לידה":             "birth_date",
    "Birth Date":             "birth_date",
    "עיר":                    "city",
    "עיר מגורים":             "city",

    # Financial
    "עלות":                   "cost",
    "עלות מעסיק":             "cost",
    "Cost":                   "cost",
    "שכר שוק":                "real_market_salary",
    "שכר שוק אמיתי":          "real_market_salary",
    "Market Salary":          "real_market_salary",
    "תאריך העלאת שכר":        "salary_raise_date",
    "אחוז העלאה":             "salary_raise_percentage",

    # Experience
    "שנות ניסיון":            "professional_experience_years",
    "ניסיון מקצועי":          "professional_experience_years",
    "Experience Years":       "professional_experience_years",

    # Risk & criticality
    "קריטיות":                "unit_criticality",
    "קריטיות ליחידה":         "unit_criticality",
    "Criticality":            "unit_criticality",
    "סיכון עזיבה":            "attrition_risk",
    "Attrition Risk":         "attrition_risk",
    "סיכון עזיבה חברה":       "company_attrition_risk",

    # Flags
    "אאוטסורסינג":            "our_sourcing",
    "דלת מסתובבת":            "revolving_door",

    # Free text
    "סיבת סיכון":             "attrition_risk_reason",
    "תוכנית שימור":           "retention_plan",
    "תוכנית שימור חברה":      "company_retention_plan",
    "סיכום מפקד":             "commander_summary_and_status",
    "נדרשת החלפה":            "replacement_needed",

    # Lifecycle
    "עזב":                    "is_left",
    "תאריך עזיבה":            "left_date",
}

# Lookup tables: the same headers name the entity instead of a person
REFERENCE_ALIASES = {
    "שם":          "name",
    "שם מלא":      "name",
    "Name":        "name",
    "תיאור":       "description",
    "Description": "description",
}

BOOLEAN_COLUMNS = {"our_sourcing", "revolving_door", "is_left"}
RISK_COLUMNS = {"unit_criticality", "attrition_risk", "company_attrition_risk"}
FLOAT_COLUMNS = {"cost", "real_market_salary", "salary_raise_percentage", "professional_experience_years"}
DATE_COLUMNS = {
    "start_date", "birth_date", "left_date",
    "salary_raise_date", "performance_update_date",
}

BOOL_TRUE  = {"true", "1", "yes", "כן"}
BOOL_FALSE = {"false", "0", "no", "לא"}

REPLACEMENT_VALUES = {
    "yes": "yes", "כן": "yes",
    "no": "no", "לא": "no",
    "undecided": "undecided", "לא הוחלט": "undecided",
}


def model_columns(collection: str) -> list[str]:
    model = COLLECTIONS[collection]
    return list(model.model_fields.keys())


def required_columns(collection: str) -> list[str]:
    return REQUIRED_COLUMNS.get(collection, REFERENCE_REQUIRED)


def _fuzzy(name: str) -> str:
    return str(name).strip().lower().replace(" ", "").replace("_", "").replace("-", "")


def normalize_columns(df: pd.DataFrame, collection: str) -> pd.DataFrame:
    """
    Step 1: rename columns to canonical field names.
    Exact alias match first, then fuzzy match (case, spaces, underscores, hyphens).
    """
    aliases = COLUMN_ALIASES if collection == "employees" else REFERENCE_ALIASES
    df = df.rename(columns=lambda c: str(c).strip())
    df = df.rename(columns=aliases)
    # Two source headers aliasing one field: the first one wins
    df = df.loc[:, ~df.columns.duplicated()]

    df_col_normalized = {_fuzzy(c): c for c in df.columns}
    rename = {}
    for target in model_columns(collection):
        if target in df.columns:
            continue
        key = _fuzzy(target)
        if key in df_col_normalized:
            rename[df_col_normalized[key]] = target

    return df.rename(columns=rename)


def coerce_boolean(value):
    if value is None or pd.isna(value):
        return None
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if v in BOOL_TRUE:
        return True
    if v in BOOL_FALSE:
        return False
    return None


def _blank_to_none(value):
    if isinstance(value, str):
        return value.strip() or None
    return value


def coerce_values(df: pd.DataFrame) -> pd.DataFrame:
    """
    Step 2: typed values.
    Blank strings become null, flags become bool, numeric fields become numbers.
    """
    df = df.apply(lambda col: col.map(_blank_to_none))

    for col in df.columns:
        if col in BOOLEAN_COLUMNS:
            df[col] = df[col].apply(coerce_boolean)
        elif col in RISK_COLUMNS or col in FLOAT_COLUMNS:
            df[col] = pd.to_numeric(df[col], errors="coerce")
        elif col == "replacement_needed":
            df[col] = df[col].apply(
                lambda x: None if x is None or pd.isna(x) else REPLACEMENT_VALUES.get(str(x).strip().lower())
            )

    return df


def split_known_columns(df: pd.DataFrame, collection: str) -> tuple[pd.DataFrame, list[str], list[str]]:
    """
    Step 3: keep only columns the collection stores.
    Returns (df, found_columns, ignored_columns).
    """
    known = model_columns(collection)
    found   = [c for c in df.columns if c in known]
    ignored = [c for c in df.columns if c not in known]
    return df[found].copy(), found, ignored


def build_schema_report(collection: str, found: list[str], ignored: list[str]) -> dict:
    optional_missing = [
        c for c in model_columns(collection)
        if c not in found and c not in required_columns(collection) and c != "id"
    ]
    return {
        "collection":       collection,
        "columns_found":    found,
        "columns_ignored":  ignored,
        "optional_missing": optional_missing,
        "note": (
            "All known columns present."
            if not optional_missing else
            f"{len(optional_missing)} optional column(s) missing, stored as empty."
        ),
    }


def normalize_dataframe(df: pd.DataFrame, collection: str) -> tuple[pd.DataFrame, dict]:
    """
    Full normalization pipeline; call this from the upload route.
    Returns (normalized_df, schema_report).
    """
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}. Options: {list(COLLECTIONS.keys())}")

    df = normalize_columns(df, collection)
    df, found, ignored = split_known_columns(df, collection)
    df = coerce_values(df)
    return df, build_schema_report(collection, found, ignored)

