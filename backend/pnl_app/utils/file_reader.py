import logging
from io import BytesIO
from typing import Any, Dict, List

import pandas as pd

logger = logging.getLogger(__name__)

MAX_ROWS = 200000
MAX_COLUMNS = 120
EXCEL_EXTENSIONS = (".xlsx", ".xls", ".xlsm", ".xltx", ".xltm")
ALLOWED_EXTENSIONS = EXCEL_EXTENSIONS + (".csv",)


class FileReadError(ValueError):
    """Uploaded file could not be turned into rows."""


def load_dataframe(content: bytes, filename: str) -> pd.DataFrame:
    if not filename or not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise FileReadError("Only Excel/CSV files are allowed.")
    if not content:
        raise FileReadError("Uploaded file is empty.")

    try:
        if filename.lower().endswith(".csv"):
            df = pd.read_csv(BytesIO(content), dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(BytesIO(content), dtype=str, keep_default_na=False)
    except Exception as exc:
        logger.error("Unable to read upload %s: %s", filename, exc, exc_info=True)
        raise FileReadError(f"Unable to read file: {exc}") from exc

    df.columns = [str(col).strip() for col in df.columns]
    df = df.apply(lambda col: col.str.strip() if pd.api.types.is_string_dtype(col) else col)
    df = df.fillna("")
    # Drop rows where every cell is blank
    df = df[~(df == "").all(axis=1)]

    if df.empty:
        raise FileReadError("No data found in file. Please check the file format.")
    if len(df) > MAX_ROWS:
        raise FileReadError(f"Uploaded file exceeds row limit ({MAX_ROWS}).")
    if len(df.columns) > MAX_COLUMNS:
        raise FileReadError(f"Uploaded file exceeds column limit ({MAX_COLUMNS}).")
    return df


def read_rows(content: bytes, filename: str) -> List[Dict[str, Any]]:
    """Parse an uploaded CSV/Excel file into header -> value mappings, in file order."""
    df = load_dataframe(content, filename)
    return df.to_dict(orient="records")
