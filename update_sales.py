from stockvision.logger import setup_logger
from stockvision.pipelines.sales import SalesPipeline


def run_sales_update():
    setup_logger()
    print("--- Starting Sales Dataset Update ---")
    if not SalesPipeline().run():
        print("❌ Sales dataset was not updated.")
        return
    print("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    run_sales_update()
