# backend/logging_setup.py
# 로깅 설정
#
# 엔트리포인트(main.create_app)에서 한 번 configure_logging()을 호출하고,
# 각 모듈은 get_logger("<module>")로 "sevqr" 하위 로거만 가져다 쓴다.

import json
import logging
import logging.config
from typing import Any, Dict, Optional

ROOT_LOGGER = "sevqr"


class JsonFormatter(logging.Formatter):
    """JSON 한 줄 포맷 (로그 수집기용)"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """패키지 루트 로거 설정"""
    formatter = "json" if json_logs else "console"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
            }
        },
        "loggers": {
            ROOT_LOGGER: {
                "handlers": ["default"],
                "level": level.upper(),
                "propagate": True,
            }
        },
    })


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
