"""In-process message channel connecting a host to method-call handlers.

A host owns a ``BinaryMessenger`` and hands it to plugins through a
``PluginBinding``. Plugins register on a named ``MethodChannel``; every call
sent over the channel is answered through a ``MethodResult`` exactly once.
"""

from __future__ import annotations

from concurrent.futures import Future, InvalidStateError
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from .dto import (
    HANDLER_ERROR,
    ErrorResponse,
    MethodCall,
    NotImplementedResponse,
    Response,
    SuccessResponse,
)
from .logging_utils import get_logger

logger = get_logger()


class MethodResult:
    """Single-shot reply sink bound to one incoming call.

    Completion goes through a ``Future`` so a second reply raises
    ``InvalidStateError`` instead of reaching the caller.
    """

    def __init__(self, call: MethodCall, future: "Future[Response]") -> None:
        self._call = call
        self._future = future

    def success(self, value: Any = None) -> None:
        self._complete(SuccessResponse(value))

    def error(self, code: str, message: Optional[str] = None, details: Any = None) -> None:
        self._complete(ErrorResponse(code=code, message=message, details=details))

    def not_implemented(self) -> None:
        self._complete(NotImplementedResponse(self._call.method))

    def _complete(self, response: Response) -> None:
        try:
            self._future.set_result(response)
        except InvalidStateError:
            logger.error("Reply already submitted for method=%s", self._call.method)
            raise


MessageHandler = Callable[[MethodCall, MethodResult], None]


class MethodCallHandler(Protocol):
    def on_method_call(self, call: MethodCall, result: MethodResult) -> None:
        ...


class BinaryMessenger:
    """Routes method calls to the handler registered for a channel name."""

    def __init__(self) -> None:
        self._handlers: Dict[str, MessageHandler] = {}

    def set_message_handler(self, channel: str, handler: Optional[MessageHandler]) -> None:
        if handler is None:
            self._handlers.pop(channel, None)
            logger.debug("Handler cleared: channel=%s", channel)
        else:
            self._handlers[channel] = handler
            logger.debug("Handler registered: channel=%s", channel)

    def has_handler(self, channel: str) -> bool:
        return channel in self._handlers

    def send(self, channel: str, call: MethodCall) -> "Future[Response]":
        future: "Future[Response]" = Future()
        result = MethodResult(call, future)

        handler = self._handlers.get(channel)
        if handler is None:
            logger.warning("No handler on channel=%s for method=%s", channel, call.method)
            result.not_implemented()
            return future

        try:
            handler(call, result)
        except Exception as exc:
            logger.error(
                "Handler raised on channel=%s method=%s: %s",
                channel,
                call.method,
                exc,
                exc_info=True,
            )
            if not future.done():
                result.error(HANDLER_ERROR, str(exc), None)
        return future


class MethodChannel:
    def __init__(self, messenger: BinaryMessenger, name: str) -> None:
        self.messenger = messenger
        self.name = name

    def set_method_call_handler(self, handler: Optional[MethodCallHandler]) -> None:
        if handler is None:
            self.messenger.set_message_handler(self.name, None)
        else:
            self.messenger.set_message_handler(self.name, handler.on_method_call)

    def invoke_method(self, method: str, arguments: Any = None) -> "Future[Response]":
        return self.messenger.send(self.name, MethodCall(method, arguments))


@dataclass
class PluginBinding:
    messenger: BinaryMessenger


__all__ = [
    "BinaryMessenger",
    "MethodCallHandler",
    "MethodChannel",
    "MethodResult",
    "PluginBinding",
]
