from __future__ import annotations

import logging

from aiohttp import web

from .config import Settings
from .web import create_app


def main() -> None:
    settings = Settings()
    logging.basicConfig(level=settings.log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = create_app(settings)
    logging.info(f"Serving latest videos on http://{settings.WEB_HOST}:{settings.WEB_PORT}")
    try:
        web.run_app(app, host=settings.WEB_HOST, port=settings.WEB_PORT, print=None)
    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == "__main__":
    main()
