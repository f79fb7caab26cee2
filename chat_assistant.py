import sys

from stockvision.assistant import AssistantError, ask_assistant
from stockvision.logger import setup_logger
from stockvision.storage import build_default_store


def run_chat(question, history=None, store=None, session=None):
    """Answers one question about the stored stock and sales datasets."""
    store = store or build_default_store()
    print("--- Asking the Inventory Assistant ---")
    try:
        reply = ask_assistant(
            question, history or [], store.get_stock(), store.get_sales(), session=session
        )
    except AssistantError as e:
        print(f"❌ Assistant unavailable: {e}")
        return None

    print(f"\n{reply}")
    return reply


if __name__ == "__main__":
    setup_logger()
    run_chat(" ".join(sys.argv[1:]))
