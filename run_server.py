#!/usr/bin/env python3
"""Start the Filmroom import API."""

import logging
import os

import uvicorn

from filmroom.database.manager import DatabaseManager

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    if os.getenv("FILMROOM_CREATE_TABLES", "true").lower() == "true":
        DatabaseManager().create_all_tables()
    
    from filmroom.api.main import app
    
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting Filmroom on http://localhost:{port}")
    for route in app.routes:
        if hasattr(route, 'path'):
            logger.info(f"  route {route.path}")
    
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
