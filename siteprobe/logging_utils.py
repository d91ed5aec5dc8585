import datetime
import json
import logging


# LogRecord 內建欄位，其餘的 (logger.x(..., extra={...})) 會被當成結構化欄位輸出
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.datetime.fromtimestamp(record.created, datetime.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """在 siteprobe logger 上掛一個 JSON handler，重複呼叫不會重複掛。"""
    logger = logging.getLogger("siteprobe")
    logger.setLevel(level.upper())

    if not any(getattr(h, "_siteprobe", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        handler._siteprobe = True
        logger.addHandler(handler)
    return logger
