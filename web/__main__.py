"""
Web entry point

Run:
    python -m web
"""

import uvicorn

from core.config.loader import get_settings
from core.logging import setup_logging
from web.app import create_app

if __name__ == "__main__":
    config = get_settings().config

    # Logging (console + file)
    setup_logging("web", console_level=config.log_level, file_level=config.log_level)

    uvicorn.run(
        create_app(config),
        host=config.web_host,
        port=config.web_port,
        reload=False,
    )
