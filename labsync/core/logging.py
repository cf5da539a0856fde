import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once; modules use ``logging.getLogger(__name__)``."""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)

    # engine INFO logs every statement
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
