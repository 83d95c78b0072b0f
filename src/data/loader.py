"""
Deal export loading.

Tokenising is left to pandas; this module only decides how a CSV upload
becomes a string-typed deal table and how parse failures are reported.
"""
import io
import logging
from pathlib import Path
from typing import Any, Dict, Union, BinaryIO

import pandas as pd

from src.config import config, COL_DEAL_NAME, ROLE_COLUMNS


logger = logging.getLogger(__name__)

DealSource = Union[str, Path, bytes, BinaryIO]


class CsvParseError(Exception):
    """Raised when an upload cannot be read as a CSV with a header row."""
    pass


def _as_buffer(source: DealSource) -> Union[str, Path, BinaryIO]:
    """Wrap raw bytes and enforce the upload size limit."""
    if isinstance(source, (bytes, bytearray)):
        size_mb = len(source) / (1024 * 1024)
        if size_mb > config.max_upload_mb:
            raise CsvParseError(
                f"file is {size_mb:.1f} MB, larger than the {config.max_upload_mb:.0f} MB limit"
            )
        return io.BytesIO(bytes(source))
    return source


def load_deals(source: DealSource) -> pd.DataFrame:
    """
    Parse a deal export into a DataFrame of strings.

    Every cell is read as text and blanks become "" so that names and dates
    reach the pipeline exactly as typed. Fully blank lines are skipped.

    Raises:
        CsvParseError: the file is empty, not UTF-8, or not tokenisable.
    """
    buffer = _as_buffer(source)
    try:
        df = pd.read_csv(
            buffer,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError as exc:
        raise CsvParseError("file is empty") from exc
    except pd.errors.ParserError as exc:
        raise CsvParseError(str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise CsvParseError(f"file is not valid UTF-8 text ({exc.reason})") from exc

    logger.info("Parsed %d deal rows with %d columns", len(df), len(df.columns))
    return df


def get_deal_status(df: pd.DataFrame) -> Dict[str, Any]:
    """Summarise a loaded deal table for the data status panel."""
    role_cols = [col for col in ROLE_COLUMNS if col in df.columns]
    status = {
        "rows": len(df),
        "columns": len(df.columns),
        "deals": df[COL_DEAL_NAME].replace("", pd.NA).nunique() if COL_DEAL_NAME in df.columns else 0,
        "role_columns_present": role_cols,
    }
    return status
