"""JSON-lines host for the text recognition plugin."""

from __future__ import annotations

import argparse
import json
import sys
import threading
from concurrent.futures import Future, wait
from typing import Any, Dict, List, Optional

from . import __version__
from .channel import BinaryMessenger, MethodChannel, PluginBinding
from .config import load_config
from .dto import INVALID_REQUEST, ErrorResponse, Response, SuccessResponse, to_wire
from .logging_utils import get_logger
from .plugin import CHANNEL_NAME, PROCESS_IMAGE, TextRecognitionPlugin
from .recognizer import TextRecognizer

_EMIT_LOCK = threading.Lock()


def _emit(payload: Dict[str, Any]) -> None:
    # replies arrive from recognizer threads
    with _EMIT_LOCK:
        print(json.dumps(payload, ensure_ascii=False), flush=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m ocr_bridge",
        description="Serve processImage requests as JSON lines on stdin/stdout.",
    )
    parser.add_argument("--image", help="Run processImage once on this file and exit.")
    parser.add_argument("--no-warmup", action="store_true", help="Skip engine warmup.")
    parser.add_argument("--log-level", help="Override OCR_LOG_LEVEL for this run.")
    return parser


def serve(channel: MethodChannel, stream=None) -> int:
    """Read requests until EOF; return the number of requests dispatched.

    Replies are written as soon as each request completes, so they may come
    out of order. Returns only after every reply has been written.
    """
    logger = get_logger()
    stream = sys.stdin if stream is None else stream
    sent: List["Future[None]"] = []

    for raw in stream:
        line = raw.strip()
        if not line:
            continue
        try:
            envelope = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.error("JSON decode error: %s", exc)
            _emit(to_wire(None, _invalid_request(str(exc))))
            continue
        if not isinstance(envelope, dict) or not isinstance(envelope.get("method"), str):
            logger.error("Malformed request: %r", envelope)
            _emit(to_wire(None, _invalid_request("Request must be an object with a method")))
            continue

        req_id = envelope.get("id")
        method = envelope["method"]
        logger.info("Request: id=%s, method=%s", req_id, method)

        done: "Future[None]" = Future()
        sent.append(done)
        reply = channel.invoke_method(method, envelope.get("arguments") or {})
        reply.add_done_callback(lambda f, req_id=req_id, done=done: _reply(req_id, f, done))

    in_flight = [f for f in sent if not f.done()]
    if in_flight:
        logger.info("Input closed; waiting for %d in-flight request(s)", len(in_flight))
        wait(in_flight)
    return len(sent)


def _reply(req_id: Any, reply: "Future[Response]", done: "Future[None]") -> None:
    try:
        _emit(to_wire(req_id, reply.result()))
        get_logger().info("Response sent for id=%s", req_id)
    finally:
        done.set_result(None)


def _invalid_request(message: str) -> Response:
    return ErrorResponse(code=INVALID_REQUEST, message=message, details=None)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    config = load_config()
    logger = get_logger(args.log_level or config.log_level)

    recognizer = TextRecognizer(config)
    plugin = TextRecognitionPlugin(recognizer)
    messenger = BinaryMessenger()
    binding = PluginBinding(messenger)
    plugin.on_attached_to_engine(binding)
    channel = MethodChannel(messenger, CHANNEL_NAME)

    try:
        if args.image:
            response = channel.invoke_method(PROCESS_IMAGE, {"imagePath": args.image}).result()
            _emit(to_wire(None, response))
            return 0 if isinstance(response, SuccessResponse) else 1

        _emit({"_boot": "ocr_bridge", "version": __version__})
        logger.info("OCR bridge worker started (lang=%s, profile=%s)", config.lang, config.profile)
        if config.warmup and not args.no_warmup:
            _emit({"_warmup": "complete", "success": recognizer.warmup()})

        handled = serve(channel)
        logger.info("Worker stopping after %d request(s)", handled)
        return 0
    finally:
        plugin.on_detached_from_engine(binding)
        recognizer.close()


if __name__ == "__main__":
    sys.exit(main())
