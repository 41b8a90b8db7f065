# peoplehub/api/upload_routes.py

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from peoplehub.api.deps import get_store, require_manager
from peoplehub.auth import AccessContext
from peoplehub.database import init_db
from peoplehub.schema import normalize_dataframe, required_columns
from peoplehub.store import COLLECTIONS, RecordStore
from peoplehub.upload import clean_dataframe, ingest_from_dataframe, read_csv_bytes, validate_data_quality

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["Upload"])


@router.post("/{collection}")
async def upload_collection(
    collection: str,
    file: UploadFile = File(...),
    access: AccessContext = Depends(require_manager),
    store: RecordStore = Depends(get_store),
):
    # 1. Validate collection, file provided and type
    if collection not in COLLECTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown collection: {collection}. Options: {list(COLLECTIONS.keys())}")
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided. Please select a CSV file to upload.")
    if not file.filename.endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files are accepted.")

    # 2. Read CSV (semicolon or comma separated)
    contents = await file.read()
    try:
        df = read_csv_bytes(contents)
    except (UnicodeDecodeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Could not read CSV: {str(e)}")
    rows_read = len(df)

    # 3. Normalize: column names, value types
    df, schema_report = normalize_dataframe(df, collection)

    # 4. Validate required columns (after normalization)
    missing_required = [col for col in required_columns(collection) if col not in df.columns]
    if missing_required:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required columns: {missing_required}. "
                   f"Found: {schema_report['columns_found']}."
        )

    # 5. Clean + validate data quality
    df = clean_dataframe(df, collection)
    quality = validate_data_quality(df, collection, rows_read)
    if not quality["passed"]:
        raise HTTPException(status_code=400, detail=" ".join(quality["errors"]))

    # 6. Replace the collection
    init_db(store.engine)
    try:
        result = ingest_from_dataframe(df, collection, store.engine)
    except Exception as e:
        logger.exception("Ingestion of %s failed", collection)
        raise HTTPException(status_code=500, detail=f"Ingestion failed: {str(e)}")

    return {
        "status":     "success",
        "collection": collection,
        "rows":       result["ingested"],
        "skipped":    result["skipped"],
        "schema":     schema_report,
        "warnings":   quality["warnings"] or None,
    }
