"""
Web entry point

Run:
    python -m web
"""

import uvicorn

from core.constants import Defaults
from core.logging import setup_logging

if __name__ == "__main__":
    setup_logging("web")
    uvicorn.run(
        "web.app:app",
        host=Defaults.WEB_HOST,
        port=Defaults.WEB_PORT,
        reload=False,
        log_config=None,
    )
