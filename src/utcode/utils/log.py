"""Logging setup for the utcode command line."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
