import logging
import re
from datetime import date, datetime
from pathlib import Path
import pandas as pd

logger = logging.getLogger(__name__)

_FILENAME_DATE = re.compile(r"(\d{4}-\d{2}-\d{2})")


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def find_latest_report(
    directory: Path, prefix: str, suffixes: tuple[str, ...] = (".csv",)
) -> tuple[Path, date] | None:
    """
    Finds the newest report whose name starts with `prefix`.
    The report date comes from a YYYY-MM-DD stamp in the filename, else the file's mtime.
    """
    if not directory.exists():
        return None

    candidates = []
    for path in directory.iterdir():
        if not path.is_file() or not path.name.startswith(prefix):
            continue
        if path.suffix.lower() not in suffixes:
            continue

        match = _FILENAME_DATE.search(path.stem)
        mtime = path.stat().st_mtime
        try:
            report_date = date.fromisoformat(match.group(1)) if match else None
        except ValueError:
            report_date = None
        if report_date is None:
            report_date = datetime.fromtimestamp(mtime).date()
        candidates.append((report_date, mtime, path))

    if not candidates:
        return None

    report_date, _, path = max(candidates)
    return path, report_date


def load_csv(file_path: Path, skiprows: int = 0) -> pd.DataFrame | None:
    """
    A robust CSV loader with a multi-stage encoding fallback.
    It will attempt to read a file in the following order:
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, a permissive fallback that never fails but might misinterpret characters.
    Cells are kept as text; numeric coercion happens in the normalizers.
    """
    try:
        return pd.read_csv(file_path, encoding="utf-8-sig", skiprows=skiprows, dtype=str)

    except UnicodeDecodeError:
        logger.info(
            f"INFO: UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return pd.read_csv(file_path, encoding="latin-1", skiprows=skiprows, dtype=str)
        except (OSError, ValueError) as e_latin1:
            logger.error(
                f"ERROR: Could not read {file_path.name} even with latin-1. Reason: {e_latin1}"
            )
            return None

    except FileNotFoundError:
        logger.info(f"INFO: Report not found at {file_path}, skipping.")
        return None

    except (OSError, ValueError) as e_general:
        # pandas raises ParserError/EmptyDataError, both ValueError subclasses.
        logger.error(
            f"ERROR: An unexpected error occurred while reading {file_path.name}. Reason: {e_general}"
        )
        return None
