import logging
from pathlib import Path
from typing import Any, Optional

from stockvision import settings, tabular
from stockvision.extractors import IdFactory
from stockvision.pipeline import IngestPipeline
from stockvision.schemas import SalesRecord, validate_sales_payload
from stockvision.storage import DataStore

logger = logging.getLogger(__name__)


class SalesPipeline(IngestPipeline):
    def __init__(
        self,
        store: Optional[DataStore] = None,
        input_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        super().__init__(
            "sales",
            settings.SALES_FILENAME_PREFIX,
            store=store,
            input_dir=input_dir,
            output_dir=output_dir,
        )
        self.id_factory = id_factory

    def extract_table(self, path: Path) -> list[SalesRecord] | None:
        df = tabular.load_table(path)
        if df is None or df.empty:
            return None

        records = tabular.normalize_sales_frame(df, id_factory=self.id_factory)
        customers = {record.customer for record in records}
        logger.info(f"  > 📊 Stats for {path.name}:")
        logger.info(f"    - Rows Analyzed: {len(df)}")
        logger.info(f"    - Transactions Kept: {len(records)}")
        logger.info(f"    - Customers: {len(customers)}")
        if len(records) < len(df):
            logger.warning(f"    - ⚠️  Rows without a product code: {len(df) - len(records)}")
        return records

    def validate(self, payload: list[dict[str, Any]]) -> list[SalesRecord]:
        return validate_sales_payload(payload)
