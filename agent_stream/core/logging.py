import logging

_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(log_level: str) -> None:
    """Configure process-wide logging for the agent stream service and client."""

    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx logs one INFO line per request.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
