"""Application entry point for TaskVault backend server."""

from taskvault.app import App
from taskvault.config import Config
from taskvault.logging import setup_logging
from taskvault.web.runner import run_server


def main() -> None:
    # Raises pydantic ValidationError on missing or malformed secrets, before anything starts
    config = Config()  # type: ignore[call-arg]
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
