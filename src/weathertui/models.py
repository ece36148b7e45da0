# value objects shared by the client, the controller and the view
# everything here is immutable so a Forecast can be swapped in atomically

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union

@dataclass(frozen=True)
class DailyRecord:
    # one entry of the provider's daily timeline
    date: str
    avg_temperature_c: float
    avg_humidity_pct: float

@dataclass(frozen=True)
class Forecast:
    days: Tuple[DailyRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.days)

@dataclass(frozen=True)
class DisplayRow:
    # already formatted strings, ready for the table
    time: str
    temperature: str
    humidity: str

# outcome of one background fetch, consumed once by the controller
@dataclass(frozen=True)
class Success:
    forecast: Forecast

@dataclass(frozen=True)
class Failure:
    error: str

FetchResult = Union[Success, Failure]

# the three mutually exclusive things the screen can show
@dataclass(frozen=True)
class Loading:
    frame: int = 0
    waiting: bool = True  # False once a fetch failed and nothing is on screen yet

@dataclass(frozen=True)
class PromptingForCity:
    buffer: str = ""

@dataclass(frozen=True)
class ShowingTable:
    city: str
    rows: Tuple[DisplayRow, ...]
    cursor: int = 0

ViewState = Union[Loading, PromptingForCity, ShowingTable]
