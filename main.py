import logging

from stockvision import data_handler
from stockvision.logger import setup_logger
from stockvision.pipelines.sales import SalesPipeline
from stockvision.pipelines.stock import StockPipeline
from stockvision.storage import build_default_store

logger = logging.getLogger(__name__)


def run_process():
    """Ingests the newest stock and sales files, then reconciles them into the dashboard summary."""
    setup_logger()
    logger.info("--- Starting Daily Stock & Sales Process ---")

    # One store for both pipelines so the summary sees what they just wrote.
    store = build_default_store()
    StockPipeline(store=store).run()
    SalesPipeline(store=store).run()

    summary = store.dashboard_summary()
    totals = summary.totals

    logger.info("\n--- Dashboard Summary ---")
    logger.info(f"Products: {len(summary.products)}")
    logger.info(f"Total stock qty: {totals.stock_qty}")
    logger.info(f"Units sold this month: {totals.monthly_sales_qty}")
    logger.info(f"Sales value this month: {totals.monthly_sales_value:,.2f}")

    logger.info("\nBest sellers:")
    for product in summary.best_sellers:
        logger.info(f"  {product.kode_produk:<15} sold {product.total_sales}")

    if summary.low_stock:
        logger.warning("\n⚠️ Low stock:")
        for product in summary.low_stock:
            logger.warning(
                f"  {product.kode_produk:<15} qty {product.qty}, remaining {product.remaining}"
            )

    data_handler.save_summary(summary)
    logger.info("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    run_process()
