from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip().lower()
    return v in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return int(float(v))
    except ValueError:
        return default


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return v.strip()


@dataclass(frozen=True)
class BridgeConfig:
    # engine
    lang: str = "en"
    profile: str = "mobile"
    det_model_dir: Optional[str] = None
    rec_model_dir: Optional[str] = None
    use_textline_orientation: bool = False
    det_limit_side_len: int = 960
    rec_batch_num: int = 8
    cpu_threads: int = 4
    use_mkldnn: bool = True
    # worker
    max_workers: int = 1
    warmup: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        object.__setattr__(self, "profile", self.profile.strip().lower())
        object.__setattr__(self, "max_workers", max(1, self.max_workers))
        object.__setattr__(self, "log_level", self.log_level.strip().upper())

    @property
    def engine_key(self) -> tuple:
        return (self.lang.lower(), self.profile, self.det_model_dir, self.rec_model_dir)


def load_config() -> BridgeConfig:
    defaults = BridgeConfig()
    return BridgeConfig(
        lang=_env_str("OCR_LANG", defaults.lang),
        profile=_env_str("OCR_PROFILE", defaults.profile),
        det_model_dir=_env_str("OCR_DET_MODEL_DIR", defaults.det_model_dir),
        rec_model_dir=_env_str("OCR_REC_MODEL_DIR", defaults.rec_model_dir),
        use_textline_orientation=_env_bool(
            "OCR_USE_TEXTLINE_ORIENTATION", defaults.use_textline_orientation
        ),
        det_limit_side_len=_env_int("OCR_DET_LIMIT_SIDE_LEN", defaults.det_limit_side_len),
        rec_batch_num=_env_int("OCR_REC_BATCH_NUM", defaults.rec_batch_num),
        cpu_threads=_env_int("OCR_CPU_THREADS", defaults.cpu_threads),
        use_mkldnn=_env_bool("OCR_USE_MKLDNN", defaults.use_mkldnn),
        max_workers=_env_int("OCR_MAX_WORKERS", defaults.max_workers),
        warmup=_env_bool("OCR_WARMUP", defaults.warmup),
        log_level=_env_str("OCR_LOG_LEVEL", defaults.log_level),
    )


__all__ = ["BridgeConfig", "load_config"]
