from stockvision.logger import setup_logger
from stockvision.pipelines.stock import StockPipeline


def run_stock_update():
    setup_logger()
    print("--- Starting Stock Dataset Update ---")
    if not StockPipeline().run():
        print("❌ Stock dataset was not updated.")
        return
    print("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    run_stock_update()
