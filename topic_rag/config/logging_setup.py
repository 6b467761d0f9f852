import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root handler for CLI and server; repeated calls only adjust the level."""
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger().setLevel(level.upper())
    # Per-request HTTP lines from the clients drown the pipeline logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
