"""
Development server for the Dice Conquest API.
Run: python server.py  (host/port from CONQUEST_HOST / CONQUEST_PORT)
"""

import uvicorn

from conquest.config import API_HOST, API_PORT, LOG_LEVEL
from conquest.logging_setup import setup_logging

if __name__ == "__main__":
    setup_logging()
    print(f"Serving at http://{API_HOST}:{API_PORT}")
    print(f"API docs at http://{API_HOST}:{API_PORT}/docs")
    print("Press Ctrl+C to stop")
    uvicorn.run("conquest.api.main:app", host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())
