import logging
import sys
from logging import StreamHandler


class ColoredFormatter(logging.Formatter):
    COLORS = {
        'DEBUG': '\033[36m', 'INFO': '\033[32m', 'WARNING': '\033[33m',
        'ERROR': '\033[31m', 'CRITICAL': '\033[35m'
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(level="INFO", color=True):
    handler = StreamHandler(sys.stdout)
    fmt = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    handler.setFormatter(ColoredFormatter(fmt) if color else logging.Formatter(fmt))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
