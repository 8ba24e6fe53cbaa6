import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

# 요청마다 SQL/연결 로그가 쏟아지지 않도록 상한만 둔다
_QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3", "httpx")


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Root logger to stdout. Safe to call again: the level from LOG_LEVEL is
    always applied, the handler is only attached once.
    """
    if isinstance(level, str):
        level = level.strip().upper()

    root = logging.getLogger()
    root.setLevel(level)
    logging.getLogger("todo_api").setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))

    if any(getattr(h, "_todo_api", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._todo_api = True
    root.addHandler(handler)
