"""Phase-aware middleware layer.

A :class:`Layer` owns a pool of :class:`~phaselayer.stack.PriorityStack`
objects, one per phase. Handlers are normalized by the adapter when they
are registered; at request time a phase's stack is composed around a
terminal handler into a single callable, which is memoized until the
phase receives another registration.

Running any phase other than the error phase is guarded by a failure
trap: an exception escaping the chain is stored in the request context
and the error phase is run once with the error terminal handler.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from phaselayer import context
from phaselayer.adapter import Tagged, adapt, as_handler
from phaselayer.config.loader import load_layer_settings
from phaselayer.config.schema import LayerSettings, TerminalResponseConfig
from phaselayer.errors import InvalidPriorityError, UnsupportedHandlerError
from phaselayer.http import Handler, Middleware, text_handler
from phaselayer.logging_config import setup_logging
from phaselayer.stack import Priority, PriorityStack

logger = logging.getLogger(__name__)


# ── Protocols ────────────────────────────────────────────────────────────


class Runnable(Protocol):
    """Something that can run a phase for a request."""

    def run(
        self,
        phase: str,
        response: Any,
        request: Any,
        terminal: Optional[Handler] = None,
    ) -> None: ...


class Pluggable(Protocol):
    """Registration surface handed to plugins."""

    def use(self, phase: str, *handlers: Any) -> Any: ...

    def use_priority(self, phase: str, priority: Priority, *handlers: Any) -> Any: ...

    def use_final_handler(self, handler: Any) -> Any: ...


class LayerProtocol(Runnable, Pluggable, Protocol):
    def flush(self) -> None: ...


@runtime_checkable
class Plugin(Protocol):
    """Component that registers its own handlers, possibly in several phases.

    For instance, a plugin can register a request and an error handler::

        class Tracing:
            def register(self, mw):
                mw.use("request", self.on_request)
                mw.use("error", self.on_error)
    """

    def register(self, mw: Pluggable) -> None: ...


class Registrar:
    """Restricted view of a :class:`Layer` passed to :meth:`Plugin.register`."""

    def __init__(self, layer: "Layer") -> None:
        self._layer = layer

    def use(self, phase: str, *handlers: Any) -> "Registrar":
        self._layer.use(phase, *handlers)
        return self

    def use_priority(self, phase: str, priority: Priority, *handlers: Any) -> "Registrar":
        self._layer.use_priority(phase, priority, *handlers)
        return self

    def use_final_handler(self, handler: Any) -> "Registrar":
        self._layer.use_final_handler(handler)
        return self


# ── Layer ────────────────────────────────────────────────────────────────


def _terminal_from_config(cfg: TerminalResponseConfig) -> Handler:
    return text_handler(cfg.status_code, cfg.body, cfg.content_type)


def _is_plugin(value: Any) -> bool:
    if isinstance(value, Tagged):
        return False
    return isinstance(value, Plugin) and callable(getattr(value, "register", None))


@dataclass(frozen=True)
class _Compiled:
    terminal: Handler
    chain: Handler


class Layer:
    """An independent, phase-partitioned middleware pipeline."""

    def __init__(self, settings: Optional[LayerSettings] = None) -> None:
        self.settings = settings or LayerSettings()
        self.request_phase = self.settings.phases.request
        self.error_phase = self.settings.phases.error
        self.error_key = self.settings.phases.error_context_key

        self._final_handler: Handler = _terminal_from_config(self.settings.final_handler)
        self._error_handler: Handler = _terminal_from_config(self.settings.error_handler)
        self._pool: Dict[str, PriorityStack] = {}
        self._memo: Dict[str, _Compiled] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, cfg_fpath: str, *, setup_logs: bool = False) -> "Layer":
        """Create a layer from a YAML configuration file.

        With *setup_logs*, file logging is configured at the file's
        ``log_level`` before the layer is built.
        """
        settings = load_layer_settings(cfg_fpath)
        if setup_logs:
            log_fpath, level = setup_logging(settings.log_level)
            logger.info("Logging to %s at %s.", log_fpath, level)
        return cls(settings)

    def __repr__(self) -> str:
        phases = ", ".join(f"{name}={len(stack)}" for name, stack in self._pool.items())
        return f"<Layer phases=[{phases}]>"

    @property
    def phases(self) -> List[str]:
        return list(self._pool)

    def handlers(self, phase: str) -> List[Middleware]:
        """Return the normalized handlers of *phase* in execution order."""
        stack = self._pool.get(phase)
        return stack.join() if stack is not None else []

    # ── Registration ─────────────────────────────────────────────────

    def use(self, phase: str, *handlers: Any) -> "Layer":
        """Register *handlers* in *phase* with normal priority."""
        return self._register(phase, Priority.NORMAL, handlers)

    def use_priority(self, phase: str, priority: Priority, *handlers: Any) -> "Layer":
        """Register *handlers* in *phase* with the given priority."""
        try:
            level = Priority(priority)
        except ValueError:
            raise InvalidPriorityError(priority) from None
        return self._register(phase, level, handlers)

    def use_final_handler(self, handler: Any) -> "Layer":
        """Replace the terminal used when ``run`` is given no terminal.

        This handler is typically responsible for replying with a custom
        response or error (e.g. the request could not be routed).
        """
        with self._lock:
            self._final_handler = as_handler(handler)
        return self

    def use_error_handler(self, handler: Any) -> "Layer":
        """Replace the terminal of the error phase run by the failure trap."""
        with self._lock:
            self._error_handler = as_handler(handler)
        return self

    def flush(self) -> None:
        """Discard every registered handler in every phase."""
        with self._lock:
            self._pool = {}
            self._memo.clear()
        logger.info("Middleware pool flushed.")

    def _register(self, phase: str, priority: Priority, handlers: Tuple[Any, ...]) -> "Layer":
        entries: List[Tuple[bool, Any]] = []
        for handler in handlers:
            if _is_plugin(handler):
                entries.append((True, handler))
                continue
            mw = adapt(handler)
            if mw is None:
                logger.error(
                    "Rejected handler %r for phase '%s': unsupported interface.",
                    handler,
                    phase,
                )
                raise UnsupportedHandlerError(handler, phase)
            entries.append((False, mw))

        with self._lock:
            # Plugins may register into any phase; a failure restores all of it.
            pool = {name: stack.copy() for name, stack in self._pool.items()}
            memo = dict(self._memo)
            final_handler = self._final_handler
            try:
                self._memo.pop(phase, None)
                stack = self._pool.setdefault(phase, PriorityStack())
                for is_plugin, value in entries:
                    if is_plugin:
                        value.register(Registrar(self))
                    else:
                        stack.push(priority, value)
            except Exception:
                self._pool = pool
                self._memo = memo
                self._final_handler = final_handler
                raise

        logger.debug(
            "Registered %d handler(s) in phase '%s' (priority=%s).",
            len(entries),
            phase,
            priority.name,
        )
        return self

    # ── Execution ────────────────────────────────────────────────────

    def _compile(self, phase: str, terminal: Handler) -> Handler:
        entry = self._memo.get(phase)
        if entry is not None and entry.terminal == terminal:
            return entry.chain

        with self._lock:
            stack = self._pool.get(phase)
            if stack is None:
                return terminal

            chain = terminal
            for mw in reversed(stack.join()):
                chain = mw(chain)

            self._memo[phase] = _Compiled(terminal, chain)
            logger.debug("Compiled phase '%s' chain (%d handler(s)).", phase, len(stack))
        return chain

    def _dispatch(
        self,
        phase: str,
        response: Any,
        request: Any,
        terminal: Optional[Handler],
    ) -> None:
        if terminal is None:
            terminal = self._final_handler
        else:
            terminal = as_handler(terminal)
        self._compile(phase, terminal)(response, request)

    def _trap(
        self,
        phase: str,
        response: Any,
        request: Any,
        terminal: Optional[Handler],
    ) -> Optional[Exception]:
        """Run *phase* and return the exception that escaped it, if any."""
        try:
            self._dispatch(phase, response, request, terminal)
        except Exception as exc:
            return exc
        return None

    def run(
        self,
        phase: str,
        response: Any,
        request: Any,
        terminal: Optional[Handler] = None,
    ) -> None:
        """Run the middleware chain of *phase* for one request.

        Failures escaping a non-error phase are stored under the error
        context key and redirected once to the error phase. Failures in
        the error phase propagate to the caller.
        """
        if phase == self.error_phase:
            self._dispatch(phase, response, request, terminal)
            return

        failure = self._trap(phase, response, request, terminal)
        if failure is None:
            return

        logger.error(
            "Recovered failure in phase '%s': %s: %s",
            phase,
            type(failure).__name__,
            failure,
            exc_info=failure,
        )
        context.set(request, self.error_key, failure)
        self._dispatch(self.error_phase, response, request, self._error_handler)
