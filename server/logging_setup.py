import logging
from pathlib import Path
from typing import Optional

from config.manager import EnvironmentManager

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(env: EnvironmentManager, log_file_name: str = "server.log") -> Optional[Path]:
    """Configure root logging with a file handler and a stderr console handler.

    Console output always goes to stderr so it never mixes with the stdio
    transport's protocol stream.

    Returns:
        Path of the log file, or None if the log directory isn't writable
    """
    # basicConfig won't do anything if the root logger already has handlers
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, env.get_log_level(), logging.INFO))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    log_file = Path(env.get_log_dir()) / log_file_name
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file.absolute()))
    except OSError as e:
        logger.warning(f"File logging disabled, cannot write to {log_file}: {e}")
        return None

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return log_file
