"""
Production entrypoint for Hostel Print Desk.

Binds to 0.0.0.0:$PORT (default 8080).
"""

import logging
import os

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8080"))
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"Starting Hostel Print Desk on port {port}")

    # Import app here to ensure clean module loading
    from web.app import create_app

    uvicorn.run(create_app(), host="0.0.0.0", port=port)
