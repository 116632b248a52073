"""Root logging setup shared by the API and the command line scripts."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once a server has installed handlers
    logging.getLogger().setLevel(level)
