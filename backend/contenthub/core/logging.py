"""ログ設定: 本番はJSON1行、開発はテキスト。service/env を全レコードに付ける"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Optional

# extra={...} で渡されたら出力に含める項目
CONTEXT_FIELDS = ("user_id", "path", "wenjuan_id", "blog_id")

# 依存ライブラリのうち INFO 以下を出させないもの
NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "fpdf", "fontTools", "multipart")


def _context(record: logging.LogRecord) -> dict:
    return {k: getattr(record, k) for k in CONTEXT_FIELDS if getattr(record, k, None) is not None}


class JSONFormatter(logging.Formatter):
    """1レコード1行のJSON。集約基盤でservice/envごとに絞り込める形にする"""

    def __init__(self, service: str, env: str):
        super().__init__()
        self.service = service
        self.env = env

    def format(self, record):
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "env": self.env,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(_context(record))
        if record.exc_info and record.exc_info[0]:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """開発用。末尾に key=value でコンテキストを並べる"""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record):
        line = super().format(record)
        ctx = _context(record)
        if ctx:
            line += " " + " ".join(f"{k}={v}" for k, v in ctx.items())
        return line


def build_formatter(log_format: str, service: str, env: str) -> logging.Formatter:
    if log_format == "text":
        return TextFormatter()
    return JSONFormatter(service=service, env=env)


def setup_logging(
    debug: bool = False,
    log_format: str = "json",
    service: str = "contenthub",
    env: str = "development",
    stream: Optional[object] = None,
):
    """ルートロガーを初期化。stream 未指定なら stdout"""
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(build_formatter(log_format, service, env))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    # アクセスログは本番のみ出す (開発はuvicorn標準出力と重複するため)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING if debug else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
