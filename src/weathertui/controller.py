# the ui state machine
# AppController owns every piece of mutable ui state and is only ever touched
# from the runner thread; background fetches talk back through FetchCompleted
# events, and what the screen shows is derived from the state on demand

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union
from .models import (
    DisplayRow,
    FetchResult,
    Failure,
    Forecast,
    Loading,
    PromptingForCity,
    ShowingTable,
    Success,
    ViewState,
)
from .service import project_rows

logger = logging.getLogger(__name__)

DEFAULT_CITY = "uyo"
INPUT_LIMIT = 100

class Key:
    QUIT = "ctrl+c"
    REFRESH = "ctrl+r"
    CHANGE_CITY = "ctrl+i"
    ENTER = "enter"
    BACKSPACE = "backspace"
    UP = "up"
    DOWN = "down"

# events, fed to update() one at a time
@dataclass(frozen=True)
class KeyEvent:
    key: str  # a Key constant or a single printable character

@dataclass(frozen=True)
class FetchCompleted:
    city: str
    result: FetchResult

@dataclass(frozen=True)
class Tick:
    pass

Event = Union[KeyEvent, FetchCompleted, Tick]

# commands, executed by whoever drives the controller
@dataclass(frozen=True)
class FetchForecast:
    city: str

@dataclass(frozen=True)
class Quit:
    pass

Command = Union[FetchForecast, Quit]

class FetchAlreadyInFlight(RuntimeError):
    pass

class AppController:
    def __init__(self, city: str = DEFAULT_CITY):
        self.last_city = city
        self.fetch_in_flight = False
        self.pending_city: Optional[str] = None
        self.prompting = False
        self.input_buffer = ""
        self.forecast: Optional[Forecast] = None  # None until the first successful fetch
        self.rows: Tuple[DisplayRow, ...] = ()
        self.cursor = 0
        self.spinner_frame = 0
        self.done = False

    def start(self) -> List[Command]:
        # the implicit fetch for the startup city
        return [self.request_fetch(self.last_city)]

    def request_fetch(self, city: str) -> FetchForecast:
        """Mark a fetch for ``city`` as in flight and return the command to run it.

        Raises FetchAlreadyInFlight, without touching any state, when another
        fetch has not completed yet. Rejected requests are dropped, not queued.
        """
        if self.fetch_in_flight:
            raise FetchAlreadyInFlight(f"already fetching weather data for {self.pending_city!r}")
        self.fetch_in_flight = True
        self.pending_city = city
        return FetchForecast(city=city)

    def update(self, event: Event) -> List[Command]:
        if self.done:
            return []
        if isinstance(event, KeyEvent):
            return self._on_key(event.key)
        if isinstance(event, FetchCompleted):
            self._on_fetch_completed(event)
            return []
        if isinstance(event, Tick):
            if self.fetch_in_flight:
                self.spinner_frame += 1
            return []
        raise TypeError(f"unknown event: {event!r}")

    @property
    def view_state(self) -> ViewState:
        if self.prompting:
            return PromptingForCity(buffer=self.input_buffer)
        if self.fetch_in_flight or self.forecast is None:
            return Loading(frame=self.spinner_frame, waiting=self.fetch_in_flight)
        return ShowingTable(city=self.last_city, rows=self.rows, cursor=self.cursor)

    def _fetch(self, city: str) -> List[Command]:
        try:
            return [self.request_fetch(city)]
        except FetchAlreadyInFlight as exc:
            logger.info("%s, ignoring request for %r", exc, city)
            return []

    def _on_fetch_completed(self, event: FetchCompleted) -> None:
        self.fetch_in_flight = False
        self.pending_city = None
        result = event.result
        if isinstance(result, Success):
            self.forecast = result.forecast
            self.rows = tuple(project_rows(result.forecast))
            self.last_city = event.city
            self.cursor = 0
        elif isinstance(result, Failure):
            # prior rows stay on screen, the error only goes to the log
            logger.warning("could not load weather for %r: %s", event.city, result.error)

    def _on_key(self, key: str) -> List[Command]:
        if key == Key.QUIT:
            self.done = True
            return [Quit()]
        if key == Key.CHANGE_CITY:
            self.input_buffer = ""
            self.prompting = True
            return []
        if self.prompting:
            return self._on_prompt_key(key)

        if key == Key.REFRESH:
            return self._fetch(self.last_city)
        if key == Key.UP and self.rows:
            self.cursor = max(self.cursor - 1, 0)
        elif key == Key.DOWN and self.rows:
            self.cursor = min(self.cursor + 1, len(self.rows) - 1)
        return []

    def _on_prompt_key(self, key: str) -> List[Command]:
        if key == Key.ENTER:
            city = self.input_buffer.strip()
            self.prompting = False
            self.input_buffer = ""
            return self._fetch(city) if city else []
        if key == Key.BACKSPACE:
            self.input_buffer = self.input_buffer[:-1]
        elif len(key) == 1 and key.isprintable() and len(self.input_buffer) < INPUT_LIMIT:
            self.input_buffer += key
        return []
