import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
DATA_DIR = Path(os.getenv("SV_DATA_DIR", BASE_DIR / ".sv-data"))
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Filename Configuration ---
STOCK_FILENAME_PREFIX = os.getenv("STOCK_FILENAME_PREFIX", "stock_")
SALES_FILENAME_PREFIX = os.getenv("SALES_FILENAME_PREFIX", "sales_")
SUMMARY_FILENAME_BASE = os.getenv("SUMMARY_FILENAME", "dashboard_summary")
INPUT_SUFFIXES = (".pdf", ".csv", ".xlsx", ".json")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() in ("1", "true", "yes")

# --- Key/Value Store (optional durable tier) ---
KV_URL = os.getenv("KV_REST_API_URL")
KV_TOKEN = os.getenv("KV_REST_API_TOKEN")
KV_NAMESPACE = os.getenv("KV_REST_API_NAMESPACE", "")
KV_PREFIX = os.getenv("SV_KV_PREFIX", "sv")
REQUEST_TIMEOUT = 15

# --- Assistant ---
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"

# --- Document Classification ---
# Only the head of the document is scanned so page footers can't dominate.
CLASSIFIER_SCAN_LIMIT = 15000
SALES_KEYWORDS = ["penjualan", "tanggal", "customer", "faktur", "kode produk"]
STOCK_KEYWORDS = ["daftar saldo stock", "gudang", "qty", "kategori"]
STOCK_ANCHOR = "daftar saldo stock"
SALES_ANCHOR = "penjualan"

# --- Dashboard Business Logic ---
LOW_STOCK_THRESHOLD = 10
LOW_STOCK_LIMIT = 10
BEST_SELLER_LIMIT = 5
UNASSIGNED_CATEGORY = "UNASSIGNED"
UNKNOWN_CATEGORY = "UNKNOWN"
UNKNOWN_WAREHOUSE = "N/A"
PLACEHOLDER = "-"

# --- Assistant Prompt Limits ---
PROMPT_RECORD_LIMIT = 50
PROMPT_HISTORY_LIMIT = 8
