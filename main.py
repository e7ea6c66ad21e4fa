"""
Main entrypoint for the Been There travel check-in game API.

Usage:
    Run directly (`python main.py`) or through uvicorn (`uvicorn been_there.api.app:app`).
    The server listens on $HOST:$PORT (default 0.0.0.0:4000).
"""
import logging
import os
from datetime import datetime

import uvicorn

from been_there.db.database import create_tables
from been_there.api.app import app

# Create logs directory
logs_dir = os.path.join(os.getcwd(), 'logs')
os.makedirs(logs_dir, exist_ok=True)

# Create log file with today's date
log_filename = os.path.join(logs_dir, f'server_{datetime.now().strftime("%Y%m%d")}.log')
file_handler = logging.FileHandler(log_filename)
file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(file_handler)

logger = logging.getLogger(__name__)


def main():
    """
    Main function to run the API server.
    """
    try:
        # Initialize database tables
        create_tables()

        port = int(os.getenv("PORT", 4000))
        host = os.getenv("HOST", "0.0.0.0")
        logger.info(f"Server running on http://{host}:{port}")
        uvicorn.run(app, host=host, port=port)

        return 0
    except Exception as e:
        logger.error(f"An error occurred in the main function: {str(e)}")
        return 1


if __name__ == "__main__":
    exit_code = main()
    print(f"Exiting with code {exit_code}")
    raise SystemExit(exit_code)
