#!/usr/bin/env python
"""Run the Kvikk Shopify app under uvicorn, bound to the port from settings (PORT)."""
import sys

import uvicorn

from kvikk_app.core.config import get_settings


def main() -> int:
    settings = get_settings()
    uvicorn.run(
        "kvikk_app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.DEBUG,
        proxy_headers=True,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
