"""
Dataset persistence for the "stock" and "sales" record sets.

Reads try the key/value store, then the JSON files on disk, then the
in-memory cache. Writes replace the whole dataset in every tier that is
available. A failing tier is logged and skipped; the cache always holds the
last known snapshot, so the dashboard keeps working on a read-only disk or
without network access.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path
from typing import Any, Literal
from urllib.parse import quote

import requests

from . import settings
from .reconciliation import reconcile
from .schemas import (
    DashboardSummary,
    PayloadValidationError,
    SalesRecord,
    StockRecord,
    validate_sales_payload,
    validate_stock_payload,
)

logger = logging.getLogger(__name__)

Dataset = Literal["stock", "sales"]

_VALIDATORS = {
    "stock": validate_stock_payload,
    "sales": validate_sales_payload,
}


class MemoryCache:
    """
    Process-scoped copy of the last known datasets.
    Refreshed by every successful read from a durable tier and by every write.
    """

    def __init__(
        self,
        stock: list[StockRecord] | None = None,
        sales: list[SalesRecord] | None = None,
    ):
        self._datasets: dict[str, list] = {
            "stock": list(stock or []),
            "sales": list(sales or []),
        }

    def get(self, dataset: Dataset) -> list:
        return list(self._datasets[dataset])

    def put(self, dataset: Dataset, records: list) -> None:
        self._datasets[dataset] = list(records)

    def reset(self) -> None:
        self._datasets = {"stock": [], "sales": []}


class FileTier:
    """JSON files, one per dataset. Disabled for the rest of the process after a failure."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.enabled = True

    def path_for(self, dataset: Dataset) -> Path:
        return self.data_dir / f"{dataset}.json"

    def read(self, dataset: Dataset) -> Any | None:
        path = self.path_for(dataset)
        if not self.enabled or not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"❌ Failed to read {path}: {e}")
            self.enabled = False
            return None

    def write(self, dataset: Dataset, payload: list[dict]) -> bool:
        if not self.enabled:
            return False
        path = self.path_for(dataset)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            logger.error(f"❌ Failed to write {path}: {e}")
            self.enabled = False
            return False


class KVTier:
    """
    REST key/value store (Upstash/Vercel KV style):
    GET {url}/get/{key} -> {"result": "<json string>"}, POST {url}/set/{key} with a JSON body.
    """

    def __init__(
        self,
        url: str,
        token: str,
        namespace: str = "",
        prefix: str = "sv",
        session: requests.Session | None = None,
        timeout: int = settings.REQUEST_TIMEOUT,
    ):
        self.url = url.rstrip("/")
        self.token = token
        self.namespace = namespace
        self.prefix = prefix
        self.session = session or requests.Session()
        self.timeout = timeout

    def key_for(self, dataset: Dataset) -> str:
        prefix = f"{self.namespace}:{self.prefix}" if self.namespace else self.prefix
        return f"{prefix}:{dataset}"

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def read(self, dataset: Dataset) -> Any | None:
        url = f"{self.url}/get/{quote(self.key_for(dataset), safe='')}"
        try:
            response = self.session.get(url, headers=self._headers, timeout=self.timeout)
            response.raise_for_status()
            result = response.json().get("result")
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"❌ KV get failed for {dataset}: {e}")
            return None

        if not isinstance(result, str):
            return None
        try:
            return json.loads(result)
        except json.JSONDecodeError as e:
            logger.error(f"❌ KV value for {dataset} is not valid JSON: {e}")
            return None

    def write(self, dataset: Dataset, payload: list[dict]) -> bool:
        url = f"{self.url}/set/{quote(self.key_for(dataset), safe='')}"
        try:
            response = self.session.post(
                url, headers=self._headers, json=payload, timeout=self.timeout
            )
            response.raise_for_status()
            return True
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ KV set failed for {dataset}: {e}")
            return False


class DataStore:
    """Facade the callers use: typed reads, validated whole-dataset writes, the summary."""

    def __init__(
        self,
        cache: MemoryCache,
        file_tier: FileTier | None = None,
        kv_tier: KVTier | None = None,
    ):
        self.cache = cache
        self.file_tier = file_tier
        self.kv_tier = kv_tier

    def _tiers(self) -> list:
        return [tier for tier in (self.kv_tier, self.file_tier) if tier is not None]

    def read(self, dataset: Dataset) -> list:
        for tier in self._tiers():
            payload = tier.read(dataset)
            if payload is None:
                continue
            try:
                records = _VALIDATORS[dataset](payload)
            except PayloadValidationError as e:
                logger.error(f"❌ Ignoring stored {dataset} data from {type(tier).__name__}: {e}")
                continue
            self.cache.put(dataset, records)
            return list(records)

        return self.cache.get(dataset)

    def write(self, dataset: Dataset, payload: Any) -> bool:
        """
        Validates and replaces a whole dataset. Raises PayloadValidationError before
        anything is touched. Returns True if at least one durable tier stored it.
        """
        records = _VALIDATORS[dataset](payload)
        self.cache.put(dataset, records)

        snapshot = [record.model_dump() for record in records]
        stored = False
        for tier in self._tiers():
            if tier.write(dataset, snapshot):
                stored = True

        if stored:
            logger.info(f"✅ {dataset.capitalize()} dataset saved ({len(records)} records).")
        else:
            logger.warning(
                f"⚠️ {dataset.capitalize()} dataset kept in memory only ({len(records)} records)."
            )
        return stored

    def get_stock(self) -> list[StockRecord]:
        return self.read("stock")

    def get_sales(self) -> list[SalesRecord]:
        return self.read("sales")

    def set_stock(self, payload: Any) -> bool:
        return self.write("stock", payload)

    def set_sales(self, payload: Any) -> bool:
        return self.write("sales", payload)

    def dashboard_summary(self, today: date | None = None) -> DashboardSummary:
        # The two reads are independent, so fetch them side by side.
        with ThreadPoolExecutor(max_workers=2) as pool:
            stock_future = pool.submit(self.get_stock)
            sales_future = pool.submit(self.get_sales)
            stock, sales = stock_future.result(), sales_future.result()
        return reconcile(stock, sales, today=today)


def build_default_store(cache: MemoryCache | None = None) -> DataStore:
    """Wires the tiers configured in settings (.env)."""
    kv_tier = None
    if settings.KV_URL and settings.KV_TOKEN:
        kv_tier = KVTier(
            settings.KV_URL,
            settings.KV_TOKEN,
            namespace=settings.KV_NAMESPACE,
            prefix=settings.KV_PREFIX,
        )
    else:
        logger.info("INFO: KV store not configured. Using disk and memory only.")

    return DataStore(
        cache or MemoryCache(),
        file_tier=FileTier(settings.DATA_DIR),
        kv_tier=kv_tier,
    )
