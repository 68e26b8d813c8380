#!/usr/bin/env python3
"""
Точка входа AquaTrack API
"""

import uvicorn

from core.config.settings import settings


def main():
    """Запуск API сервера."""
    uvicorn.run(
        "apps.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
