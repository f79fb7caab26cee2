import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from stockvision import settings, data_handler, utils
from stockvision.pdf import convert_pdf
from stockvision.schemas import PayloadValidationError
from stockvision.storage import DataStore, build_default_store

logger = logging.getLogger(__name__)


class IngestPipeline(ABC):
    """
    Abstract base class for dataset ingestion (Stock, Sales).
    Follows an Extract -> Transform -> Load (ETL) pattern:
    newest input file -> validated records -> full dataset replace in the store.
    """

    def __init__(
        self,
        report_type: str,
        prefix: str,
        store: Optional[DataStore] = None,
        input_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
    ):
        self.report_type = report_type
        self.prefix = prefix
        self.store = store or build_default_store()
        self.input_dir = input_dir or settings.INPUT_DIR
        self.output_dir = output_dir
        self.source: Optional[Path] = None

    def run(self) -> bool:
        """Orchestrates the pipeline execution. Returns True when the dataset was replaced."""
        logger.info(f"🚀 STEP: {self.report_type.upper()} DATASET")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        found = utils.find_latest_report(self.input_dir, self.prefix, settings.INPUT_SUFFIXES)
        if not found:
            logger.warning(f"⚠️ No {self.report_type} file ({self.prefix}*) in {self.input_dir}.")
            return False

        self.source, report_date = found
        logger.info(f"  > Found: {self.source.name} (File Date: {report_date})")

        records = self.extract(self.source)
        if not records:
            logger.warning(f"⚠️ No data extracted for {self.report_type}. Keeping the stored dataset.")
            return False

        # --- 2. TRANSFORM ---
        payload = self.transform(records)
        if payload is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return False

        # --- 3. LOAD ---
        self.load(payload)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return True

    def extract(self, path: Path) -> list[BaseModel] | None:
        """PDF reports go through the classifier; other exports through the column mapper."""
        if path.suffix.lower() == ".pdf":
            result = convert_pdf(path.read_bytes(), file_name=path.name)
            if result is None:
                return None
            if result.type != self.report_type:
                logger.error(
                    f"❌ {path.name} looks like a {result.type} report, not {self.report_type}."
                )
                return None
            return result.rows
        return self.extract_table(path)

    @abstractmethod
    def extract_table(self, path: Path) -> list[BaseModel] | None:
        """Decodes a CSV/Excel/JSON export into records."""
        pass

    @abstractmethod
    def validate(self, payload: list[dict[str, Any]]) -> list[BaseModel]:
        pass

    def transform(self, records: list[BaseModel]) -> list[dict[str, Any]] | None:
        """
        Checks the records against the wire schema before anything is stored.
        Returns the payload ready for a full dataset replace.
        """
        payload = [record.model_dump() for record in records]
        try:
            logger.info("Validating data against schema...")
            self.validate(payload)
            logger.info(f"✅ Data validation successful ({len(payload)} records).")
            return payload
        except PayloadValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

    def load(self, payload: list[dict[str, Any]]):
        """Replaces the dataset in the store and saves CSV/JSON copies."""
        self.store.write(self.report_type, payload)
        data_handler.save_outputs(
            self.validate(payload), f"{self.report_type}_dataset", self.output_dir
        )
