"""Bridge handler answering processImage calls over a method channel."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Callable, Optional

import numpy as np

from .channel import MethodChannel, MethodResult, PluginBinding
from .decoder import decode_image
from .dto import INVALID_ARGUMENT, PROCESSING_ERROR, RECOGNITION_ERROR, MethodCall
from .logging_utils import get_logger
from .recognizer import RecognizedText, TextRecognizer

CHANNEL_NAME = "ocr_bridge/text_recognition"
PROCESS_IMAGE = "processImage"

logger = get_logger()


class TextRecognitionPlugin:
    """Answers ``processImage`` calls with the text found in an image file."""

    def __init__(
        self,
        recognizer: Optional[TextRecognizer] = None,
        decoder: Callable[[str], np.ndarray] = decode_image,
    ) -> None:
        self._recognizer = recognizer or TextRecognizer()
        self._decoder = decoder
        self._channel: Optional[MethodChannel] = None

    @property
    def attached(self) -> bool:
        return self._channel is not None

    def on_attached_to_engine(self, binding: PluginBinding) -> None:
        self._channel = MethodChannel(binding.messenger, CHANNEL_NAME)
        self._channel.set_method_call_handler(self)
        logger.info("Attached on channel=%s", CHANNEL_NAME)

    def on_detached_from_engine(self, binding: PluginBinding) -> None:
        if self._channel is not None:
            self._channel.set_method_call_handler(None)
            self._channel = None
        logger.info("Detached from channel=%s", CHANNEL_NAME)

    def on_method_call(self, call: MethodCall, result: MethodResult) -> None:
        if call.method == PROCESS_IMAGE:
            image_path = call.argument("imagePath")
            # blank paths are rejected here rather than left to the decoder
            if isinstance(image_path, str) and image_path.strip():
                self._process_image(image_path, result)
            else:
                logger.warning("processImage called without a usable imagePath")
                result.error(INVALID_ARGUMENT, "Image path is required", None)
        else:
            result.not_implemented()

    def _process_image(self, image_path: str, result: MethodResult) -> None:
        try:
            image = self._decoder(image_path)
            task = self._recognizer.process(image)
        except Exception as exc:
            logger.warning("Failed to process image %s: %s", image_path, exc)
            result.error(PROCESSING_ERROR, str(exc), None)
            return

        def _on_done(done: "Future[RecognizedText]") -> None:
            exc = done.exception()
            if exc is not None:
                logger.error("Recognition failed for %s: %s", image_path, exc, exc_info=exc)
                result.error(RECOGNITION_ERROR, str(exc), None)
            else:
                result.success({"text": done.result().text})

        task.add_done_callback(_on_done)
