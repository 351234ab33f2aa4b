"""
main.py
========
Central entry point for the speech-to-text service.

Run with:
    uvicorn main:app --reload
"""

import logging

from dotenv import load_dotenv

load_dotenv()  # Load .env before any module reads env vars

# Configure logging for the entire application
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Keep Google client transport chatter out of the request logs.
for _google_logger_name in (
    "google.auth",
    "google.auth.transport",
    "google.api_core",
    "urllib3",
    "urllib3.connectionpool",
):
    logging.getLogger(_google_logger_name).setLevel(logging.WARNING)

from speechtxt.api.app import create_app  # noqa: E402
from speechtxt.settings import load_settings  # noqa: E402

app = create_app()

if __name__ == "__main__":
    import uvicorn

    _settings = load_settings()
    logger = logging.getLogger("speechtxt")
    logger.info("Server running on port %d", _settings.server.port)
    logger.info("Available routes:")
    logger.info("- POST   /speechtotext          : Upload and transcribe an audio file")
    logger.info("- GET    /speechtotext/{email}  : Get transcriptions by email")
    uvicorn.run("main:app", host=_settings.server.host, port=_settings.server.port)
