import logging
from pathlib import Path
from typing import Any, Optional

from stockvision import settings, tabular
from stockvision.pipeline import IngestPipeline
from stockvision.schemas import StockRecord, validate_stock_payload
from stockvision.storage import DataStore

logger = logging.getLogger(__name__)


class StockPipeline(IngestPipeline):
    def __init__(
        self,
        store: Optional[DataStore] = None,
        input_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
    ):
        super().__init__(
            "stock",
            settings.STOCK_FILENAME_PREFIX,
            store=store,
            input_dir=input_dir,
            output_dir=output_dir,
        )

    def extract_table(self, path: Path) -> list[StockRecord] | None:
        df = tabular.load_table(path)
        if df is None or df.empty:
            return None

        records = tabular.normalize_stock_frame(df)
        logger.info(f"  > 📊 Stats for {path.name}:")
        logger.info(f"    - Rows Analyzed: {len(df)}")
        logger.info(f"    - Stock Rows Kept: {len(records)}")
        if len(records) < len(df):
            logger.warning(f"    - ⚠️  Rows without a product code: {len(df) - len(records)}")
        return records

    def validate(self, payload: list[dict[str, Any]]) -> list[StockRecord]:
        return validate_stock_payload(payload)
