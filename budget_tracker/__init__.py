"""Budget Tracker: log expenses to a CSV file and browse them in the terminal."""

import logging

__version__ = "0.3.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
