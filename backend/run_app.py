import os

import uvicorn
from dotenv import load_dotenv

if __name__ == "__main__":
    # Values in .env only fill in what the environment does not set
    env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", ".env")
    if os.path.exists(env_path):
        load_dotenv(env_path)

    host = os.environ.get("INVOICEDESK_HOST", "0.0.0.0")
    port = int(os.environ.get("INVOICEDESK_PORT", "8000"))
    reload = os.environ.get("INVOICEDESK_RELOAD", "").lower() in ("1", "true", "yes")

    print(f"Starting InvoiceDesk API on {host}:{port}...")
    uvicorn.run("invoicedesk.main:app", host=host, port=port, log_level="info", reload=reload)
