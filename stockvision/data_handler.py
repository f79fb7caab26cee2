import json
import logging
from pathlib import Path

import pandas as pd
from pydantic import BaseModel

from . import settings
from . import utils
from .schemas import DashboardSummary

logger = logging.getLogger(__name__)


def save_outputs(
    validated_data: list[BaseModel], base_name: str, output_dir: Path | None = None
) -> Path:
    """Saves validated records to CSV and conditionally to JSON, with dated filenames."""
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = output_dir / f"{base_name}_{date_suffix}.csv"
    json_path = output_dir / f"{base_name}_{date_suffix}.json"

    rows = [item.model_dump() for item in validated_data]
    pd.DataFrame(rows).to_csv(csv_path, index=False)
    logger.info(f"✅ Normalized report saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2, default=str, ensure_ascii=False)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return csv_path


def save_summary(summary: DashboardSummary, output_dir: Path | None = None) -> Path:
    """
    Writes the dashboard summary as JSON (camelCase keys, as the dashboard expects)
    and the linked product table as CSV.
    """
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    json_path = output_dir / f"{settings.SUMMARY_FILENAME_BASE}_{date_suffix}.json"
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(summary.model_dump(mode="json", by_alias=True), f, indent=2, ensure_ascii=False)
    logger.info(f"✅ Dashboard summary saved to: {json_path}")

    products_path = output_dir / f"linked_products_{date_suffix}.csv"
    products = pd.DataFrame(
        [p.model_dump(by_alias=True, exclude={"transactions"}) for p in summary.products]
    )
    products.to_csv(products_path, index=False)
    logger.info(f"✅ Linked products saved to: {products_path}")

    return json_path
