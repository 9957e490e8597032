import json
import logging
from logging.config import dictConfig

from aiohttp import web

from .config import Settings


def configure_logging(settings: Settings):
    if settings.logging_config_file:
        with open(settings.logging_config_file) as fl:
            dictConfig(json.load(fl))
        return

    logging.basicConfig()
    logging.getLogger().setLevel(logging.DEBUG if settings.debug else logging.INFO)


def invoke():
    settings = Settings()  # type: ignore
    configure_logging(settings)

    from .server import create_app

    web.run_app(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    invoke()
