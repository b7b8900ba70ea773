# realleads/common/tracing.py
"""
Per-command trace ids and the log format that carries them.

Log calls use a CamelCase event name as the message and put structured
fields in `extra=`; KeyValueFormatter appends those fields as key=value
pairs so they survive plain-text logging.
"""
from __future__ import annotations
import logging, uuid
from contextvars import ContextVar, Token
from typing import Callable, Optional

_TRACE_ID: ContextVar[Optional[str]] = ContextVar("realleads_trace_id", default=None)

# attributes every LogRecord has; anything else came in through extra=
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "trace_id", "taskName"}

_FACTORY_INSTALLED = False


def new_trace_id() -> str:
    return uuid.uuid4().hex


def get_trace_id() -> Optional[str]:
    return _TRACE_ID.get()


def set_trace_id(value: Optional[str]) -> Token:
    return _TRACE_ID.set(value)


def reset_trace_id(token: Token) -> None:
    _TRACE_ID.reset(token)


class KeyValueFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}
        if not fields:
            return line
        return line + " " + " ".join(f"{k}={v!r}" for k, v in sorted(fields.items()))


def _install_logrecord_factory() -> None:
    """Every LogRecord gets .trace_id, third-party loggers included."""
    global _FACTORY_INSTALLED
    if _FACTORY_INSTALLED:
        return
    old_factory: Callable[..., logging.LogRecord] = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs) -> logging.LogRecord:
        record = old_factory(*args, **kwargs)
        if not hasattr(record, "trace_id"):
            record.trace_id = get_trace_id() or "-"
        return record

    logging.setLogRecordFactory(record_factory)
    _FACTORY_INSTALLED = True


def setup_logging(level: int | str = logging.INFO) -> None:
    _install_logrecord_factory()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    handler = logging.StreamHandler()
    handler.setFormatter(KeyValueFormatter("%(asctime)s %(levelname)s %(name)s [trace=%(trace_id)s]: %(message)s"))
    logging.basicConfig(level=level, handlers=[handler])
