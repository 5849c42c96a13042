import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """앱 시작 시 1회 호출. uvicorn 핸들러가 이미 있으면 레벨만 맞춘다."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    root.setLevel(level.upper())
    logging.getLogger("app").setLevel(level.upper())
