# state machine tests, driven purely through update() with hand-made events

import pytest
from weathertui.controller import (
    DEFAULT_CITY,
    AppController,
    FetchAlreadyInFlight,
    FetchCompleted,
    FetchForecast,
    Key,
    KeyEvent,
    Quit,
    Tick,
)
from weathertui.models import (
    DailyRecord,
    Failure,
    Forecast,
    Loading,
    PromptingForCity,
    ShowingTable,
    Success,
)


def forecast(n=3):
    return Forecast(days=tuple(
        DailyRecord(f"2024-05-0{i + 1}T11:00:00Z", 20.0 + i, 70.0 + i) for i in range(n)
    ))


def keys(controller, *names):
    commands = []
    for name in names:
        commands += controller.update(KeyEvent(name))
    return commands


def type_text(controller, text):
    return keys(controller, *text)


def loaded(city=DEFAULT_CITY, n=3):
    # a controller that has finished its startup fetch
    c = AppController(city)
    c.start()
    c.update(FetchCompleted(city, Success(forecast(n))))
    return c


def test_initial_state_is_loading_default_city():
    c = AppController()
    assert c.last_city == "uyo"
    assert isinstance(c.view_state, Loading)
    assert c.start() == [FetchForecast("uyo")]
    assert c.fetch_in_flight


def test_request_fetch_sets_flag_synchronously():
    c = loaded()
    assert not c.fetch_in_flight
    command = c.request_fetch("lagos")
    # visible before any result arrives
    assert c.fetch_in_flight
    assert command == FetchForecast("lagos")
    assert isinstance(c.view_state, Loading)


def test_second_request_is_rejected_without_state_change():
    c = AppController()
    c.start()
    before = vars(c).copy()
    with pytest.raises(FetchAlreadyInFlight):
        c.request_fetch("paris")
    assert vars(c) == before


def test_refresh_while_in_flight_emits_nothing():
    c = AppController()
    c.start()
    assert keys(c, Key.REFRESH) == []
    assert c.pending_city == "uyo"


def test_success_shows_table():
    c = loaded(n=3)
    view = c.view_state
    assert isinstance(view, ShowingTable)
    assert view.city == "uyo"
    assert len(view.rows) == 3
    assert view.rows[0].temperature == "20.00°C"
    assert not c.fetch_in_flight


def test_failure_keeps_previous_table():
    c = loaded(n=3)
    old_rows = c.rows
    assert keys(c, Key.REFRESH) == [FetchForecast("uyo")]
    c.update(FetchCompleted("uyo", Failure("invalid JSON")))

    view = c.view_state
    assert isinstance(view, ShowingTable)
    assert view.rows == old_rows
    assert not c.fetch_in_flight


def test_failure_without_data_stays_loading_with_retry():
    c = AppController()
    c.start()
    c.update(FetchCompleted("uyo", Failure("connection refused")))
    assert c.view_state == Loading(frame=0, waiting=False)

    # refresh is the retry
    assert keys(c, Key.REFRESH) == [FetchForecast("uyo")]
    assert c.view_state.waiting


def test_failed_city_does_not_replace_last_city():
    c = loaded()
    keys(c, Key.CHANGE_CITY)
    type_text(c, "atlantis")
    keys(c, Key.ENTER)
    c.update(FetchCompleted("atlantis", Failure("HTTP 400")))
    assert c.view_state.city == "uyo"


def test_change_city_prompt_edits_buffer():
    c = loaded()
    keys(c, Key.CHANGE_CITY)
    type_text(c, "parsi")
    keys(c, Key.BACKSPACE, Key.BACKSPACE)
    type_text(c, "is")
    assert c.view_state == PromptingForCity(buffer="paris")


def test_prompt_keys_are_text_not_commands():
    c = loaded()
    keys(c, Key.CHANGE_CITY)
    # cursor keys do nothing while typing
    assert keys(c, Key.UP, Key.DOWN, Key.REFRESH) == []
    type_text(c, "q r")
    assert c.view_state == PromptingForCity(buffer="q r")


def test_change_city_clears_old_input():
    c = loaded()
    keys(c, Key.CHANGE_CITY)
    type_text(c, "abc")
    keys(c, Key.CHANGE_CITY)
    assert c.view_state == PromptingForCity(buffer="")


def test_input_is_capped():
    c = loaded()
    keys(c, Key.CHANGE_CITY)
    type_text(c, "x" * 150)
    assert len(c.input_buffer) == 100


def test_confirm_dispatches_fetch_for_typed_city():
    c = loaded()
    keys(c, Key.CHANGE_CITY)
    type_text(c, "  paris ")
    assert keys(c, Key.ENTER) == [FetchForecast("paris")]
    assert isinstance(c.view_state, Loading)
    assert c.input_buffer == ""


def test_confirm_empty_buffer_returns_to_table():
    c = loaded()
    keys(c, Key.CHANGE_CITY)
    type_text(c, "   ")
    assert keys(c, Key.ENTER) == []
    assert isinstance(c.view_state, ShowingTable)


def test_confirm_while_fetching_is_rejected():
    c = AppController()
    c.start()
    keys(c, Key.CHANGE_CITY)
    type_text(c, "paris")
    assert keys(c, Key.ENTER) == []
    # the startup fetch is still the one outstanding
    assert c.pending_city == "uyo"
    assert c.view_state.waiting


def test_completion_while_prompting_stays_in_prompt():
    c = AppController()
    c.start()
    keys(c, Key.CHANGE_CITY)
    type_text(c, "pa")
    c.update(FetchCompleted("uyo", Success(forecast(2))))
    assert c.view_state == PromptingForCity(buffer="pa")

    keys(c, Key.ENTER)
    # the confirmed fetch goes out now that nothing is in flight
    assert c.pending_city == "pa"


def test_cursor_moves_within_rows():
    c = loaded(n=3)
    keys(c, Key.UP)
    assert c.view_state.cursor == 0
    keys(c, Key.DOWN, Key.DOWN, Key.DOWN, Key.DOWN)
    assert c.view_state.cursor == 2
    keys(c, Key.UP)
    assert c.view_state.cursor == 1


def test_new_data_resets_cursor():
    c = loaded(n=3)
    keys(c, Key.DOWN, Key.DOWN, Key.REFRESH)
    c.update(FetchCompleted("uyo", Success(forecast(4))))
    assert c.view_state.cursor == 0
    assert len(c.view_state.rows) == 4


def test_tick_animates_spinner_only_while_fetching():
    c = AppController()
    c.start()
    c.update(Tick())
    c.update(Tick())
    assert c.view_state.frame == 2

    c.update(FetchCompleted("uyo", Failure("boom")))
    c.update(Tick())
    assert c.view_state.frame == 2


def test_quit_from_any_state():
    c = AppController()
    c.start()
    keys(c, Key.CHANGE_CITY)
    assert keys(c, Key.QUIT) == [Quit()]
    # nothing is processed after quitting
    assert keys(c, "a", Key.ENTER) == []
    assert c.input_buffer == ""


def test_unknown_event_type():
    with pytest.raises(TypeError):
        AppController().update("ctrl+c")


def test_end_to_end_uyo_then_paris():
    c = AppController()
    assert c.start() == [FetchForecast("uyo")]
    assert isinstance(c.view_state, Loading)

    c.update(FetchCompleted("uyo", Success(forecast(3))))
    view = c.view_state
    assert isinstance(view, ShowingTable)
    assert len(view.rows) == 3
    assert c.last_city == "uyo"

    keys(c, Key.CHANGE_CITY)
    type_text(c, "paris")
    assert keys(c, Key.ENTER) == [FetchForecast("paris")]
    assert isinstance(c.view_state, Loading)

    assert keys(c, Key.QUIT) == [Quit()]


def test_empty_success_shows_empty_table():
    c = AppController()
    c.start()
    c.update(FetchCompleted("uyo", Success(Forecast())))
    # a successful answer with no days is still data, not a failed load
    assert c.view_state == ShowingTable(city="uyo", rows=(), cursor=0)
    assert keys(c, Key.DOWN, Key.UP) == []
    assert c.view_state.cursor == 0


def test_failure_after_empty_success_keeps_table():
    c = AppController()
    c.start()
    c.update(FetchCompleted("uyo", Success(Forecast())))
    keys(c, Key.REFRESH)
    c.update(FetchCompleted("uyo", Failure("connection refused")))
    assert c.view_state == ShowingTable(city="uyo", rows=(), cursor=0)
