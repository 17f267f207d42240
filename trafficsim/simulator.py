"""The simulation kernel.

One tick of ``TrafficSimulator.run``:

  1. execute the events scheduled for the current tick, in insertion order
  2. advance every road, in creation order
  3. advance every junction, in creation order
  4. increment the tick
  5. notify listeners (``advanced``)
  6. write one report section per junction, road and vehicle, if an output
     sink is set

Scenario errors stop the current ``run`` and reach the caller only through
the listeners' ``error`` callback. Any other exception is reported the same
way and then re-raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from functools import partial
from itertools import chain
from typing import TextIO

from .builders import Builder, parse_events
from .errors import (
    Err,
    Ok,
    ReportWriteError,
    Result,
    ScenarioInvalidError,
    SimulatorError,
    TickError,
)
from .events import Event
from .ini import dumps
from .junctions import Junction
from .listener import Dispatch, EventType, SimulatorListener, UpdateEvent
from .multimap import MultiTreeMap
from .roadmap import RoadMap
from .roads import Road
from .simobject import SimulatedObject
from .vehicles import Vehicle

logger = logging.getLogger(__name__)


class TrafficSimulator:
    """Drives a RoadMap forward tick by tick from a schedule of events.

    ``dispatch`` is the hook used to hand listener callbacks to a UI thread;
    without it callbacks run inline. While ``run`` is in progress, calls to
    ``add_event`` and ``reset`` (typically from a listener) are queued and
    applied in order once ``run`` returns. A queued call that fails is
    reported through ``error`` and the rest still run.
    """

    def __init__(self, output: TextIO | None = None, *, dispatch: Dispatch | None = None):
        self._output = output
        self._dispatch = dispatch
        self._events: MultiTreeMap[int, Event] = MultiTreeMap()
        self._ticks = 0
        self._road_map = RoadMap()
        self._listeners: list[SimulatorListener] = []
        self._stop_requested = False
        self._running = False
        self._deferred: list[Callable[[], None]] = []

    @property
    def current_tick(self) -> int:
        return self._ticks

    @property
    def road_map(self) -> RoadMap:
        return self._road_map

    @property
    def events(self) -> list[Event]:
        return self._events.values_list()

    def pending_events(self) -> list[Event]:
        return self._events.values_from(self._ticks)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def add_event(self, event: Event) -> None:
        if event.time < self._ticks:
            raise ScenarioInvalidError(
                f"event at time {event.time} is in the past (current tick {self._ticks})"
            )
        if self._running:
            logger.debug("deferring %s until the current run returns", event)
            self._deferred.append(partial(self.add_event, event))
            return
        self._events.put_value(event.time, event)
        self._notify(EventType.NEW_EVENT)

    def load_events(
        self, text: str, builders: Sequence[Builder] | None = None
    ) -> Result[list[Event], SimulatorError]:
        """Parse scenario text and schedule all of it, or none of it."""
        try:
            events = parse_events(text, builders)
            for e in events:
                if e.time < self._ticks:
                    raise ScenarioInvalidError(
                        f"{e.summary()} at time {e.time} is in the past "
                        f"(current tick {self._ticks})"
                    )
        except SimulatorError as e:
            logger.warning("scenario rejected: %s", e)
            self._notify(EventType.ERROR, e)
            return Err(e)
        for e in events:
            self.add_event(e)
        logger.info("scheduled %d events", len(events))
        return Ok(events)

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def request_stop(self) -> None:
        """Stop the current run before its next tick starts."""
        self._stop_requested = True

    def run(self, ticks: int) -> None:
        if ticks <= 0:
            return
        limit = self._ticks + ticks
        self._stop_requested = False
        self._running = True
        try:
            while self._ticks < limit and not self._stop_requested:
                try:
                    self._step()
                except SimulatorError as e:
                    self._fail(e)
                    return
                except Exception as e:
                    raise self._fail(e) from e
            if self._stop_requested:
                logger.info("run stopped at tick %d", self._ticks)
        finally:
            self._running = False
            self._apply_deferred()

    def _step(self) -> None:
        for event in self._events.get(self._ticks):
            logger.debug("tick %d: %s", self._ticks, event.summary())
            event.execute(self._road_map)
        for road in self._road_map.roads:
            road.advance()
        for junction in self._road_map.junctions:
            junction.advance()
        self._ticks += 1
        self._notify(EventType.ADVANCED)
        if self._output is not None:
            self._write_reports(
                self._output,
                chain(self._road_map.junctions, self._road_map.roads, self._road_map.vehicles),
            )

    def _write_reports(self, output: TextIO, objects: Iterable[SimulatedObject]) -> None:
        for obj in objects:
            text = obj.generate_report(self._ticks).dumps() + "\n"
            try:
                output.write(text)
            except (OSError, ValueError) as e:
                raise ReportWriteError(obj.id, self._ticks) from e

    def _fail(self, cause: Exception) -> TickError:
        err = TickError(self._ticks, cause)
        err.__cause__ = cause
        logger.error("%s", err)
        self._notify(EventType.ERROR, err)
        return err

    def _apply_deferred(self) -> None:
        """Replay calls queued during a run; failures go to listeners."""
        pending, self._deferred = self._deferred, []
        for call in pending:
            try:
                call()
            except SimulatorError as e:
                logger.warning("deferred call failed: %s", e)
                self._notify(EventType.ERROR, e)

    def reset(self) -> None:
        if self._running:
            logger.debug("deferring reset until the current run returns")
            self._deferred.append(self.reset)
            return
        self._events = MultiTreeMap()
        self._road_map = RoadMap()
        self._ticks = 0
        self._notify(EventType.RESET)

    def generate_report(
        self,
        junctions: Iterable[Junction] = (),
        roads: Iterable[Road] = (),
        vehicles: Iterable[Vehicle] = (),
    ) -> str:
        """Report text for a chosen subset of objects at the current tick."""
        return dumps(
            o.generate_report(self._ticks) for o in chain(junctions, roads, vehicles)
        )

    # ------------------------------------------------------------------
    # Output and listeners
    # ------------------------------------------------------------------

    def set_output(self, output: TextIO | None) -> None:
        self._output = output

    def add_listener(self, listener: SimulatorListener) -> None:
        self._listeners.append(listener)
        self._deliver(listener, self._snapshot(EventType.REGISTERED))

    def remove_listener(self, listener: SimulatorListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _snapshot(self, type: EventType) -> UpdateEvent:
        return UpdateEvent(
            type=type,
            current_tick=self._ticks,
            road_map=self._road_map,
            pending_events=tuple(self.pending_events()),
        )

    def _notify(self, type: EventType, error: SimulatorError | None = None) -> None:
        update = self._snapshot(type)
        for listener in list(self._listeners):
            self._deliver(listener, update, error)

    def _deliver(
        self,
        listener: SimulatorListener,
        update: UpdateEvent,
        error: SimulatorError | None = None,
    ) -> None:
        match update.type:
            case EventType.REGISTERED:
                callback = partial(listener.registered, update)
            case EventType.RESET:
                callback = partial(listener.reset, update)
            case EventType.NEW_EVENT:
                callback = partial(listener.new_event, update)
            case EventType.ADVANCED:
                callback = partial(listener.advanced, update)
            case EventType.ERROR:
                assert error is not None
                callback = partial(listener.error, update, error)
        if self._dispatch is None:
            callback()
        else:
            self._dispatch(callback)
