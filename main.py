"""
GiftWise Backend — Entry Point.

Single entry point: `python main.py` starts the HTTP API and the daily
reminder/nudge scheduler.
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

import uvicorn

from giftwise.api.app import create_app
from giftwise.config import settings

if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.PORT)
