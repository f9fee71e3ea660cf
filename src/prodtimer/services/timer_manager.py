"""TimerManager: owns the active timer, saved timers, and beep state.

One manager is built per process by :func:`build_timer_manager` and handed
down the call chain (the CLI keeps it on ``AppContext``). There is no
module-level instance.

INVARIANT: :meth:`TimerManager.execute` never raises. Validation faults keep
the normalizer's error code; operational faults are converted at the
dispatch boundary into a failed :class:`ServiceResult`.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

from prodtimer.domain.commands import (
    Command,
    CreateCommand,
    DeleteSavedTimerCommand,
    EndCommand,
    InfoCommand,
    ListSavedTimersCommand,
    PauseCommand,
    ResetCommand,
    SaveCommand,
    StartCommand,
    StatsCommand,
    StopBeepingCommand,
    UpdateConfigCommand,
    parse_command,
)
from prodtimer.domain.errors import DomainError
from prodtimer.domain.normalize import CommandError, NormalizedCommand, normalize_command_object
from prodtimer.domain.timer import CountdownTimer, TimerBrief, TimerInfo, TimerSpec
from prodtimer.domain.timer_state import TimerState
from prodtimer.infrastructure.config_store import ConfigManager, SavedTimerNotFoundError
from prodtimer.infrastructure.speaker import Speaker
from prodtimer.infrastructure.timer_log import TimerLogger
from prodtimer.services.contracts import (
    SavedTimerItem,
    SavedTimerListData,
    TimerInfoData,
    dump_validated,
)
from prodtimer.services.result import ServiceResult
from prodtimer.services.stats import get_stats

if TYPE_CHECKING:
    from prodtimer.config.settings import TimerSettings

logger = logging.getLogger(__name__)


class NoActiveTimerError(DomainError):
    """A lifecycle command arrived while no timer is active."""

    code = "NO_ACTIVE_TIMER"

    def __init__(self) -> None:
        super().__init__("No timer exists.")


class SpeakerFactory(Protocol):
    def __call__(
        self,
        *,
        on_callback: Callable[[], None],
        off_callback: Callable[[], None],
    ) -> Speaker: ...


class TimerManager:
    """Dispatches typed commands against the in-memory timer state.

    Commands are processed one at a time; callers await each
    :meth:`execute` before sending the next. :meth:`init` must complete
    before the first command.
    """

    def __init__(
        self,
        *,
        config_manager: ConfigManager,
        timer_logger: TimerLogger,
        speaker_factory: SpeakerFactory = Speaker,
        ms_in_one_second: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config_manager = config_manager
        self._timer_logger = timer_logger
        self._speaker_factory = speaker_factory
        self._ms_in_one_second = ms_in_one_second
        self._clock = clock
        self._wall_clock = wall_clock
        self._now = now

        self._speaker: Speaker | None = None
        self._current: CountdownTimer | None = None
        self._saved: dict[str, CountdownTimer] = {}
        self._beep_duration_ms = 0
        self._is_beeping = False

        self._init_lock = asyncio.Lock()
        self._initialized = False

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def current_timer(self) -> CountdownTimer | None:
        return self._current

    @property
    def saved_timers(self) -> Mapping[str, CountdownTimer]:
        return MappingProxyType(self._saved)

    @property
    def is_beeping(self) -> bool:
        return self._is_beeping

    @property
    def beep_duration_ms(self) -> int:
        return self._beep_duration_ms

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> None:
        """Load config, prepare the log directory, and build the speaker.

        Concurrent callers wait for the first one; later calls return at once.
        """
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            await self._config_manager.init()
            await self._retrieve_and_set_config()
            await self._timer_logger.init()
            self._speaker = self._speaker_factory(
                on_callback=self._set_beeping_on,
                off_callback=self._set_beeping_off,
            )
            self._initialized = True
            logger.debug("Timer manager initialized with %d saved timers", len(self._saved))

    async def try_init(self) -> ServiceResult | None:
        """Run :meth:`init`, returning a failed result instead of raising.

        Returns None once the manager is ready.
        """
        try:
            await self.init()
        except DomainError as exc:
            return ServiceResult.failure("init", exc.code, exc.message)
        except OSError as exc:
            logger.warning("I/O failure during init: %s", exc)
            return ServiceResult.failure("init", "IO_ERROR", str(exc))
        return None

    async def close(self) -> None:
        """Drop pending elapsation, finish any running completion, stop beeping."""
        if self._current is not None:
            await self._current.aclose()
        if self._speaker is not None:
            await self._speaker.off()
        self._is_beeping = False

    async def wait_for_active_timer(self) -> TimerInfo:
        """Block until the active timer has ended; return its final info."""
        timer = self._require_current()
        await timer.wait_ended()
        info = timer.info()
        assert isinstance(info, TimerInfo)
        return info

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute_raw(self, command_object: Any) -> ServiceResult:
        """Normalize, parse, and execute a raw ``{command, options, arguments}`` object."""
        normalized = normalize_command_object(command_object)
        if isinstance(normalized, CommandError):
            return ServiceResult.failure(_raw_op(command_object), normalized.code, normalized.message)
        return await self.execute(normalized)

    async def execute(self, command: Command | NormalizedCommand) -> ServiceResult:
        """Execute one command, returning a result instead of raising."""
        if isinstance(command, NormalizedCommand):
            parsed = parse_command(command)
            if isinstance(parsed, CommandError):
                return ServiceResult.failure(command.command.lower(), parsed.code, parsed.message)
            command = parsed

        op = str(getattr(command, "command", "unknown")).lower()
        if not self._initialized:
            return ServiceResult.failure(op, "NOT_INITIALIZED", "Timer manager is not initialized.")

        try:
            data = await self._dispatch(command)
        except DomainError as exc:
            return ServiceResult.failure(op, exc.code, exc.message)
        except ValidationError as exc:
            return ServiceResult.failure(op, "VALIDATION_ERROR", _first_validation_message(exc))
        except OSError as exc:
            logger.warning("I/O failure during %s: %s", op, exc)
            return ServiceResult.failure(op, "IO_ERROR", str(exc))
        except Exception as exc:
            logger.exception("Unexpected failure during %s", op)
            return ServiceResult.failure(op, "INTERNAL_ERROR", str(exc) or type(exc).__name__)

        return ServiceResult(ok=True, op=op, data=data or {})

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch(self, command: Command) -> dict[str, Any] | None:
        if self._is_beeping:
            await self._stop_beeping()
            if isinstance(command, StopBeepingCommand):
                return None

        match command:
            case StartCommand(argument=str() as name):
                return await self._start_saved_timer(name)
            case StartCommand() | PauseCommand() | ResetCommand() | EndCommand() | InfoCommand():
                return await self._forward_to_current(command)
            case CreateCommand(argument=spec):
                return await self._create_timer(spec)
            case SaveCommand(argument=spec):
                return await self._save_timer(spec)
            case UpdateConfigCommand():
                await self._retrieve_and_set_config()
                return {"beep_duration_ms": self._beep_duration_ms, "saved_timers": len(self._saved)}
            case ListSavedTimersCommand():
                return self._list_saved_timers()
            case DeleteSavedTimerCommand(argument=name):
                await self._config_manager.delete_saved_timer(name)
                await self._retrieve_and_set_config()
                return {"name": name}
            case StatsCommand(argument=arg):
                stats = await get_stats(self._timer_logger, arg, now=self._now())
                return stats.model_dump(mode="json")
            case StopBeepingCommand():
                return None
            case _:
                name = getattr(command, "command", command)
                msg = f'Invalid command: "{name}"'
                raise DomainError(msg, code="INVALID_COMMAND")

    async def _forward_to_current(self, command: Command) -> dict[str, Any]:
        timer = self._require_current()
        match command:
            case StartCommand():
                info = timer.start()
            case PauseCommand():
                info = timer.pause()
            case ResetCommand():
                info = timer.reset()
            case EndCommand():
                info = await timer.end()
            case _:
                info = timer.info()
        return dump_validated(TimerInfoData, info.model_dump(mode="json"))

    async def _create_timer(self, spec: TimerSpec) -> dict[str, Any]:
        timer = CountdownTimer.from_spec(
            spec,
            callback=self._on_timer_complete,
            ms_in_one_second=self._ms_in_one_second,
            clock=self._clock,
            wall_clock=self._wall_clock,
        )
        await self._replace_current(timer)
        logger.debug("Created timer %r (%dms)", spec.name, timer.duration)
        return dump_validated(TimerInfoData, timer.info().model_dump(mode="json"))

    async def _start_saved_timer(self, name: str) -> dict[str, Any]:
        template = self._saved.get(name)
        if template is None:
            msg = f'No saved timer with name: "{name}"'
            raise SavedTimerNotFoundError(msg)

        current = self._current
        resumable = (TimerState.CREATED, TimerState.PAUSED, TimerState.RUNNING)
        if current is None or current.name != name or current.state not in resumable:
            await self._replace_current(self._timer_from_brief(template.info(brief=True)))
        return await self._forward_to_current(StartCommand())

    async def _save_timer(self, spec: TimerSpec | None) -> dict[str, Any]:
        if spec is not None:
            brief = await self._config_manager.save_timer(spec)
        else:
            timer = self._require_current()
            snapshot = timer.info(brief=True)
            brief = await self._config_manager.save_timer(snapshot, is_trusted=True)
        self._saved[brief.name] = self._timer_from_brief(brief)
        return dump_validated(SavedTimerItem, brief.model_dump())

    def _list_saved_timers(self) -> dict[str, Any]:
        items = [timer.info(brief=True).model_dump() for timer in self._saved.values()]
        return dump_validated(SavedTimerListData, {"count": len(items), "items": items})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _replace_current(self, timer: CountdownTimer) -> None:
        """Make *timer* current; the old one finishes any in-flight completion."""
        previous, self._current = self._current, timer
        if previous is not None:
            await previous.aclose()

    def _require_current(self) -> CountdownTimer:
        if self._current is None:
            raise NoActiveTimerError
        return self._current

    def _timer_from_brief(self, brief: TimerBrief) -> CountdownTimer:
        return CountdownTimer(
            name=brief.name,
            description=brief.description,
            duration_ms=brief.duration,
            callback=self._on_timer_complete,
            clock=self._clock,
            wall_clock=self._wall_clock,
        )

    async def _retrieve_and_set_config(self) -> None:
        await self._config_manager.update_config()
        config = await self._config_manager.get_config()
        self._beep_duration_ms = config.beep_duration_ms
        self._saved = {
            name: self._timer_from_brief(brief) for name, brief in config.saved_timers.items()
        }

    async def _on_timer_complete(self, info: TimerInfo) -> None:
        if self._speaker is not None:
            await self._speaker.on(self._beep_duration_ms)
        try:
            await self._timer_logger.log(info)
        except OSError:
            logger.exception("Failed to log session for timer %r", info.name)

    async def _stop_beeping(self) -> None:
        if self._speaker is not None:
            await self._speaker.off()
        self._is_beeping = False

    def _set_beeping_on(self) -> None:
        self._is_beeping = True

    def _set_beeping_off(self) -> None:
        self._is_beeping = False


def _raw_op(command_object: Any) -> str:
    name = command_object.get("command") if isinstance(command_object, Mapping) else None
    return name.lower() if isinstance(name, str) and name else "unknown"


def _first_validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    where = ".".join(str(part) for part in first["loc"])
    return f"{where}: {first['msg']}" if where else str(first["msg"])


def build_timer_manager(settings: TimerSettings) -> TimerManager:
    """Wire a manager to the file-backed collaborators named by *settings*."""
    timer_cfg = settings.timer
    return TimerManager(
        config_manager=ConfigManager(
            settings.store_path,
            default_beep_duration_ms=timer_cfg.beep_duration_ms,
            ms_in_one_second=timer_cfg.ms_in_one_second,
        ),
        timer_logger=TimerLogger(settings.logs_dir),
        speaker_factory=functools.partial(Speaker, interval_ms=timer_cfg.beep_interval_ms),
        ms_in_one_second=timer_cfg.ms_in_one_second,
    )
