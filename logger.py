# logger.py

import logging

from config import Config

LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'


#-- initialize a logger that writes to stderr, and to LOG_FILE when configured
def setup_logger(name: str, log_file: str = None, level=None):
    log_file = log_file or Config.LOG_FILE
    level = level or getattr(logging, Config.LOG_LEVEL, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def log_llm_message(logger: logging.Logger, session_uuid: str, category: str, prompt: str, message: str):
    # Keep log lines short; prompts and answers can run to several paragraphs
    prompt_str = prompt[:80].replace("\n", " ")
    message_str = message[:80].replace("\n", " ") if message else ""
    logger.info(f"{session_uuid} | {category} | {prompt_str} | {message_str}")
