# curses front end: reads keys, runs fetches on a background worker and
# feeds everything to the controller through a single queue
# the controller is only touched from the thread that calls run()

from __future__ import annotations
import curses
import logging
import queue
import threading
from concurrent.futures import Executor, Future
from typing import Callable, Iterable, Optional
from .controller import (
    AppController,
    Command,
    Event,
    FetchCompleted,
    FetchForecast,
    Key,
    KeyEvent,
    Quit,
    Tick,
)
from .models import Failure, FetchResult
from .view import DEFAULT_WIDTH, TABLE_CHROME, TABLE_HEIGHT, render

logger = logging.getLogger(__name__)

POLL_MS = 100  # also the spinner speed

_KEYS = {
    "\x03": Key.QUIT,
    "\x12": Key.REFRESH,
    "\t": Key.CHANGE_CITY,
    "\n": Key.ENTER,
    "\r": Key.ENTER,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
    curses.KEY_ENTER: Key.ENTER,
    curses.KEY_BACKSPACE: Key.BACKSPACE,
    curses.KEY_UP: Key.UP,
    curses.KEY_DOWN: Key.DOWN,
}

def translate_key(ch) -> Optional[str]:
    # get_wch() gives a str for characters and an int for function keys
    if ch in _KEYS:
        return _KEYS[ch]
    if isinstance(ch, str) and ch.isprintable():
        return ch
    return None

class DaemonThreadExecutor(Executor):
    # one daemon thread per job; ThreadPoolExecutor joins its workers at exit,
    # which would keep a quit waiting on a hung request
    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()

        def work():
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = fn(*args, **kwargs)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

        threading.Thread(target=work, name="weather-fetch", daemon=True).start()
        return future

class TerminalRunner:
    def __init__(
        self,
        controller: AppController,
        job: Callable[[str], FetchResult],
        executor: Executor | None = None,
    ):
        self.controller = controller
        self.job = job
        self.events: "queue.Queue[Event]" = queue.Queue()
        self.executor = executor or DaemonThreadExecutor()

    def post(self, event: Event) -> None:
        self.events.put(event)

    def execute(self, commands: Iterable[Command]) -> bool:
        # returns False once a Quit has been seen
        for command in commands:
            if isinstance(command, Quit):
                return False
            if isinstance(command, FetchForecast):
                self._submit(command.city)
        return True

    def _submit(self, city: str) -> None:
        logger.debug("dispatching fetch for %r", city)
        future = self.executor.submit(self.job, city)
        future.add_done_callback(lambda f: self._on_done(city, f))

    def _on_done(self, city: str, future: Future) -> None:
        # runs on the worker thread, so it only posts; the controller sees it later
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("fetch job for %r crashed: %s", city, exc)
            result: FetchResult = Failure(error=str(exc))
        else:
            result = future.result()
        self.post(FetchCompleted(city=city, result=result))

    def process_pending(self) -> bool:
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return True
            if not self.execute(self.controller.update(event)):
                return False

    def read_event(self, screen) -> Optional[Event]:
        try:
            ch = screen.get_wch()
        except curses.error:  # timed out without a key
            return Tick()
        key = translate_key(ch)
        return KeyEvent(key) if key else None

    def draw(self, screen) -> None:
        height, width = screen.getmaxyx()
        text = render(
            self.controller.view_state,
            width=max(min(width - 1, DEFAULT_WIDTH), 1),
            table_height=min(TABLE_HEIGHT, height - TABLE_CHROME),
        )
        screen.erase()
        for y, line in enumerate(text.split("\n")[:height]):
            screen.addnstr(y, 0, line, max(width - 1, 0))
        screen.refresh()

    def run(self, screen) -> None:
        screen.keypad(True)
        screen.timeout(POLL_MS)
        try:
            running = self.execute(self.controller.start())
            while running:
                self.draw(screen)
                event = self.read_event(screen)
                if event is not None:
                    self.post(event)
                running = self.process_pending()
        finally:
            self.executor.shutdown(wait=False, cancel_futures=True)

def run_app(stdscr, controller: AppController, job: Callable[[str], FetchResult]) -> None:
    # entry point for curses.wrapper
    curses.raw()  # ctrl+c, ctrl+r and friends arrive as keys
    try:
        curses.curs_set(0)
    except curses.error:
        pass  # some terminals cannot hide the cursor
    TerminalRunner(controller, job).run(stdscr)
