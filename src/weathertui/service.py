# pure pieces between the http client and the ui:
# decode the provider payload, project it into table rows,
# and load_forecast, the job that runs on the background worker

from __future__ import annotations
import json
import logging
from typing import Any, List
from .client import WeatherAPIClient, WeatherAPIError
from .models import DailyRecord, DisplayRow, Failure, FetchResult, Forecast, Success

logger = logging.getLogger(__name__)

DATE_WIDTH = 10  # YYYY-MM-DD

class DecodeError(ValueError):
    pass

def _number(value: Any, field: str) -> float:
    # bool is an int subclass, but true/false is never a reading
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{field} is not a number: {value!r}")
    return float(value)

# tomorrow.io shape: data["timelines"]["daily"][i]["values"]["temperatureAvg"]
def parse_forecast(payload) -> Forecast:
    if isinstance(payload, (bytes, bytearray, str)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:  # JSONDecodeError and bad utf-8 both land here
            raise DecodeError(f"invalid JSON: {exc}") from exc

    try:
        daily = payload["timelines"]["daily"]
    except (KeyError, TypeError) as exc:
        raise DecodeError("unexpected payload shape: missing timelines.daily") from exc
    if not isinstance(daily, list):
        raise DecodeError("timelines.daily is not a list")

    days = []
    for i, item in enumerate(daily):
        try:
            time, values = item["time"], item["values"]
            temperature, humidity = values["temperatureAvg"], values["humidityAvg"]
        except (KeyError, TypeError) as exc:
            raise DecodeError(f"daily[{i}] is missing {exc}") from exc
        if not isinstance(time, str):
            raise DecodeError(f"daily[{i}].time is not a string")
        days.append(DailyRecord(
            date=time,
            avg_temperature_c=_number(temperature, f"daily[{i}].temperatureAvg"),
            avg_humidity_pct=_number(humidity, f"daily[{i}].humidityAvg"),
        ))
    return Forecast(days=tuple(days))

def project_rows(forecast: Forecast) -> List[DisplayRow]:
    # slicing never raises, so a short date is shown as-is
    return [
        DisplayRow(
            time=day.date[:DATE_WIDTH],
            temperature=f"{day.avg_temperature_c:.2f}°C",
            humidity=f"{day.avg_humidity_pct:.2f}%",
        )
        for day in forecast.days
    ]

# single city path: fetch -> decode, errors become a Failure instead of escaping the worker
def load_forecast(client: WeatherAPIClient, city: str) -> FetchResult:
    try:
        body = client.fetch(city)
        forecast = parse_forecast(body)
    except (WeatherAPIError, ValueError) as exc:  # DecodeError is a ValueError
        logger.warning("fetching weather for %r failed: %s", city, exc)
        return Failure(error=str(exc))
    logger.debug("decoded %d daily records for %r", len(forecast), city)
    return Success(forecast=forecast)
