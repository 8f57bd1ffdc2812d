import logging
from unittest.mock import MagicMock

import pytest
from PIL import Image

from ocr_bridge.channel import BinaryMessenger, MethodChannel, PluginBinding
from ocr_bridge.config import BridgeConfig
from ocr_bridge.decoder import decode_image
from ocr_bridge.logging_utils import get_logger
from ocr_bridge.plugin import CHANNEL_NAME, TextRecognitionPlugin
from ocr_bridge.recognizer import TextRecognizer


@pytest.fixture
def fake_engine():
    """
    PaddleOCR の代わりに使う決定的なエンジン。
    predict() は常に "HELLO" を返す。
    """
    engine = MagicMock()
    engine.predict.return_value = [{"rec_texts": ["HELLO"], "rec_scores": [0.99]}]
    return engine


@pytest.fixture
def recognizer(fake_engine):
    rec = TextRecognizer(BridgeConfig(max_workers=2), engine=fake_engine)
    yield rec
    rec.close()


@pytest.fixture
def decoder():
    return MagicMock(side_effect=decode_image)


@pytest.fixture
def attached(recognizer, decoder):
    """Plugin attached to a fresh messenger; yields (plugin, channel, binding)."""
    plugin = TextRecognitionPlugin(recognizer, decoder=decoder)
    binding = PluginBinding(BinaryMessenger())
    plugin.on_attached_to_engine(binding)
    yield plugin, MethodChannel(binding.messenger, CHANNEL_NAME), binding
    plugin.on_detached_from_engine(binding)


@pytest.fixture
def sample_png(tmp_path):
    path = tmp_path / "sample.png"
    Image.new("RGB", (64, 24), color=(255, 255, 255)).save(path)
    return path


@pytest.fixture
def corrupt_png(tmp_path):
    path = tmp_path / "corrupt.png"
    path.write_text("fake-image")
    return path


@pytest.fixture
def bridge_log(caplog):
    """
    ocr_bridge ロガーは propagate=False なので、caplog のハンドラを直接付ける。
    """
    logger = get_logger()
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)
    logger.setLevel(logging.INFO)
