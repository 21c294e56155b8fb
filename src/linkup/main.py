"""Application entry point for the Linkup API server."""

from linkup.app import App
from linkup.config import Config
from linkup.core.core import Core
from linkup.logging import setup_logging
from linkup.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(Core.from_config(config))
    run_server(app, config)


if __name__ == "__main__":
    main()
