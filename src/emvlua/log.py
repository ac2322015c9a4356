"""log.py - subsystem logging on top of OpenTelemetry spans.

one call does three things: prints a prefixed line when the subsystem's
threshold allows it, attaches the line to the active span as an event, and
hands it to the registered sink. the span event and the sink see every
line, whatever the console threshold.

in the world: the radio. every unit calls in on the same channel, and the
recorder keeps the chatter the dispatcher tuned out.
"""

import sys
from contextlib import contextmanager
from datetime import datetime

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

SERVICE = "emvlua"

_provider = TracerProvider(resource=Resource.create({"service.name": SERVICE}))
_tracer = _provider.get_tracer(SERVICE, "0.1.0")
_console_exporting = False


def enable_console_export(out=None):
    """print finished spans as JSON, to stderr unless out is given. idempotent."""
    global _console_exporting
    if _console_exporting:
        return
    add_exporter(ConsoleSpanExporter(out=out or sys.stderr))
    _console_exporting = True


def add_exporter(exporter):
    _provider.add_span_processor(SimpleSpanProcessor(exporter))


def get_tracer():
    return _tracer


# ============================================================
# THRESHOLDS
# ============================================================

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}

_default_level = LEVELS["info"]
_subsystem_levels: dict[str, int] = {}


def set_level(level: str, subsystem: str = ""):
    """console threshold, for everything or for one subsystem.

    unknown names mean info. set_level("debug", "decode") shows decoder
    detail without opening up the rest.
    """
    global _default_level
    value = LEVELS.get(level, LEVELS["info"])
    if subsystem:
        _subsystem_levels[subsystem] = value
    else:
        _default_level = value
        _subsystem_levels.clear()


def get_level(subsystem: str = "") -> str:
    value = _subsystem_levels.get(subsystem, _default_level)
    return next((name for name, v in LEVELS.items() if v == value), "info")


def _enabled(subsystem: str, level: str) -> bool:
    threshold = _subsystem_levels.get(subsystem, _default_level)
    return LEVELS.get(level, LEVELS["info"]) >= threshold


# ============================================================
# SINK
# ============================================================

_sink = None
_sink_flush = None


def set_sink(fn, flush_fn=None):
    """fn(subsystem, level, message, attrs_or_None) gets every line.

    flush_fn, if given, is what flush_sink() calls. None clears both.
    """
    global _sink, _sink_flush
    _sink, _sink_flush = fn, flush_fn


def flush_sink():
    if _sink_flush is None:
        return
    try:
        _sink_flush()
    except Exception:
        pass  # a broken sink must not fail shutdown


# ============================================================
# LOGGING
# ============================================================

_console_stream = None


def set_console(stream=None):
    """send every console line to stream. None restores the default split:
    warn and error to stderr, the rest to stdout.
    """
    global _console_stream
    _console_stream = stream


def _console(subsystem: str, level: str, message: str):
    stamp = datetime.now().strftime("%H:%M:%S")
    stream = _console_stream
    if stream is None:
        stream = sys.stderr if level in ("warn", "error") else sys.stdout
    print(f"[{stamp} {SERVICE}:{subsystem}] {message}", file=stream)


def _event(subsystem: str, level: str, message: str, attrs: dict):
    current = trace.get_current_span()
    if not current.is_recording():
        return
    fields = {"message": message, "subsystem": subsystem}
    fields.update((k, str(v)) for k, v in attrs.items())
    current.add_event(f"{SERVICE}.{subsystem}.{level}", attributes=fields)


def log(subsystem: str, level: str, message: str, **attrs):
    if _enabled(subsystem, level):
        _console(subsystem, level, message)
    _event(subsystem, level, message, attrs)
    if _sink is None:
        return
    try:
        _sink(subsystem, level, message, attrs or None)
    except Exception:
        pass  # sink errors never reach the caller


def debug(subsystem: str, message: str, **attrs):
    log(subsystem, "debug", message, **attrs)


def info(subsystem: str, message: str, **attrs):
    log(subsystem, "info", message, **attrs)


def warn(subsystem: str, message: str, **attrs):
    log(subsystem, "warn", message, **attrs)


def error(subsystem: str, message: str, **attrs):
    log(subsystem, "error", message, **attrs)


@contextmanager
def span(name: str, subsystem: str = SERVICE, **attrs):
    """run the block inside a span named emvlua.<subsystem>.<name>.

        with span("parse", subsystem="parser", chars=len(text)):
            ...

    attrs become emvlua.<key> span attributes, stringified. log lines
    inside the block land on this span as events.
    """
    attributes = {f"{SERVICE}.{k}": str(v) for k, v in attrs.items()}
    attributes[f"{SERVICE}.subsystem"] = subsystem
    with _tracer.start_as_current_span(f"{SERVICE}.{subsystem}.{name}",
                                       attributes=attributes) as current:
        yield current
