# process bootstrap: optional debug log, api client, curses main loop, exit codes

from __future__ import annotations
import curses
import locale
import logging
import os
import sys
from functools import partial
from .client import WeatherAPIClient, WeatherAPIError
from .controller import DEFAULT_CITY, AppController
from .service import load_forecast
from .tui import run_app

PACKAGE_LOGGER = "weathertui"
LOG_FILE = "debug.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)

# nothing may write to the terminal while curses owns it, setup_debug_log adds the only real handler
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

def setup_debug_log(path: str = LOG_FILE) -> logging.Handler:
    # raises OSError when the file cannot be opened
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger(PACKAGE_LOGGER)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    return handler

def main() -> int:
    handler = None
    if os.getenv("DEBUG"):
        try:
            handler = setup_debug_log()
        except OSError as exc:
            print("fatal:", exc)
            return 1

    try:
        client = WeatherAPIClient()
    except WeatherAPIError as exc:
        print("fatal:", exc)
        return 1

    city = (os.getenv("WEATHERTUI_CITY") or "").strip() or DEFAULT_CITY
    try:
        locale.setlocale(locale.LC_ALL, "")  # lets curses draw the table borders
    except locale.Error as exc:
        logger.warning("keeping the C locale: %s", exc)

    try:
        curses.wrapper(run_app, AppController(city), partial(load_forecast, client))
    except Exception as exc:
        logger.exception("ui loop failed")
        print("Error running program:", exc)
        return 1
    finally:
        client.close()
        if handler is not None:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
            handler.close()
    return 0

if __name__ == "__main__":
    sys.exit(main())
