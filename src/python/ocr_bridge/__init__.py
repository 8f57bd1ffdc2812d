"""Text recognition bridge: ``processImage`` over a method channel."""

from .channel import BinaryMessenger, MethodChannel, MethodResult, PluginBinding
from .plugin import CHANNEL_NAME, TextRecognitionPlugin
from .recognizer import RecognizedText, TextRecognizer

__version__ = "1.0.0"

__all__ = [
    "BinaryMessenger",
    "CHANNEL_NAME",
    "MethodChannel",
    "MethodResult",
    "PluginBinding",
    "RecognizedText",
    "TextRecognitionPlugin",
    "TextRecognizer",
]
