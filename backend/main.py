"""Development server entry point."""
from __future__ import annotations

import os
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

from qaforum import create_app  # noqa: E402

app = create_app()

logger.remove()
logger.add(sys.stderr, level=app.config["LOG_LEVEL"].upper())


if __name__ == "__main__":
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", 5000)), debug=app.debug)
