"""Text recognition backed by PaddleOCR.

Performance notes:
- Engines are cached process-wide so models load once per configuration
- Heavy document pre-processing stays off
- Inference runs on a small thread pool; callers get a Future per image
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .config import BridgeConfig
from .logging_utils import get_logger

logger = get_logger()

_ENGINE_CACHE: Dict[tuple, Any] = {}
_ENGINE_LOCK = threading.Lock()
_DUMMY_IMAGE = np.full((32, 128, 3), 255, dtype=np.uint8)


@dataclass
class RecognizedText:
    """Recognized fragments in reading order with their scores."""

    texts: List[str] = field(default_factory=list)
    scores: List[Optional[float]] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.texts)

    @property
    def mean_confidence(self) -> Optional[float]:
        vals = [v for v in self.scores if isinstance(v, (int, float))]
        if not vals:
            return None
        return float(sum(vals) / len(vals))


def _build_engine_kwargs(config: BridgeConfig) -> dict:
    kwargs: dict = {
        "lang": config.lang,
        "use_doc_orientation_classify": False,
        "use_doc_unwarping": False,
        "use_textline_orientation": config.use_textline_orientation,
        "text_det_limit_side_len": config.det_limit_side_len,
        "text_recognition_batch_size": config.rec_batch_num,
        "cpu_threads": config.cpu_threads,
        "enable_mkldnn": config.use_mkldnn,
    }

    if config.det_model_dir or config.rec_model_dir:
        if config.det_model_dir:
            kwargs["text_detection_model_dir"] = config.det_model_dir
        if config.rec_model_dir:
            kwargs["text_recognition_model_dir"] = config.rec_model_dir
    elif config.profile == "server":
        kwargs["text_detection_model_name"] = "PP-OCRv5_server_det"
        kwargs["text_recognition_model_name"] = "PP-OCRv5_server_rec"

    return kwargs


def _get_engine(config: BridgeConfig):
    key = config.engine_key
    with _ENGINE_LOCK:
        if key not in _ENGINE_CACHE:
            from paddleocr import PaddleOCR

            kwargs = _build_engine_kwargs(config)
            logger.info(
                "[BOOT] Initializing PaddleOCR: lang=%s profile=%s det_limit=%d rec_batch=%d",
                config.lang,
                config.profile,
                config.det_limit_side_len,
                config.rec_batch_num,
            )
            try:
                engine = PaddleOCR(**kwargs)
            except (TypeError, ValueError) as exc:
                # older releases reject the tuning keys
                logger.warning("PaddleOCR rejected tuning options (%s); using lang only", exc)
                engine = PaddleOCR(lang=config.lang)
            _ENGINE_CACHE[key] = engine
        return _ENGINE_CACHE[key]


class TextRecognizer:
    def __init__(self, config: Optional[BridgeConfig] = None, engine: Any = None) -> None:
        self.config = config or BridgeConfig()
        self._engine = engine
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="ocr-bridge-recognizer",
        )

    @property
    def engine(self):
        if self._engine is None:
            self._engine = _get_engine(self.config)
        return self._engine

    def recognize(self, image: np.ndarray) -> RecognizedText:
        """Run OCR on a decoded BGR image and return normalized results."""
        t0 = time.perf_counter()
        raw_result = self.engine.predict(image)
        t1 = time.perf_counter()
        result = _normalize_result(raw_result)
        t2 = time.perf_counter()

        logger.info(
            "[PERF] infer=%.1fms postproc=%.1fms shape=%s",
            (t1 - t0) * 1000.0,
            (t2 - t1) * 1000.0,
            getattr(image, "shape", None),
        )
        logger.info(
            "[OCR] n_fragments=%d mean_conf=%s",
            len(result.texts),
            f"{result.mean_confidence:.2f}" if result.mean_confidence is not None else "-",
        )
        if not result.texts:
            logger.warning("OCR returned empty text")
        return result

    def process(self, image: np.ndarray) -> "Future[RecognizedText]":
        return self._executor.submit(self.recognize, image)

    def warmup(self) -> bool:
        t0 = time.perf_counter()
        try:
            self.engine.predict(_DUMMY_IMAGE)
        except Exception as exc:
            logger.error("Warmup failed: %s", exc, exc_info=True)
            return False
        logger.info("Warmup: engine ready in %.2fs", time.perf_counter() - t0)
        return True

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def _normalize_result(raw: Any) -> RecognizedText:
    texts: List[str] = []
    scores: List[Optional[float]] = []

    if isinstance(raw, Sequence) and raw:
        first = raw[0]
        if hasattr(first, "get"):
            texts = [str(t) for t in (first.get("rec_texts") or [])]
            scores = [_safe_float(v) for v in (first.get("rec_scores") or [])]
            if len(scores) < len(texts):
                scores.extend([None] * (len(texts) - len(scores)))
        elif isinstance(first, Sequence):
            for item in first:
                try:
                    text, score = item[1]
                except (IndexError, TypeError, ValueError):
                    continue
                texts.append(str(text))
                scores.append(_safe_float(score))

    return RecognizedText(texts=texts, scores=scores[: len(texts)])


def _safe_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


__all__ = ["RecognizedText", "TextRecognizer"]
