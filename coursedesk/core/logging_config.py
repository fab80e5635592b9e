import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO"):
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # uvicorn installs its own handlers; keep its access log at the same level
    logging.getLogger("uvicorn.access").setLevel(level.upper())
