import re
import logging

# Characters that are not allowed in file names or break Content-Disposition
UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')

PACKAGE_LOGGER = "extratorzap"


def setup_logger(name: str) -> logging.Logger:
    """
    Setup standardized logging across all modules.

    Module loggers carry no level of their own; they inherit it from the
    package logger, which ``set_log_level`` configures.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if package_logger.level == logging.NOTSET:
        package_logger.setLevel(logging.INFO)

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def set_log_level(level: str):
    """Apply LOG_LEVEL to every extratorzap.* logger"""
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def clean_text(text: str) -> str:
    """Collapse whitespace, used for log previews of model output"""
    if not text:
        return ""
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def safe_filename_part(value: str) -> str:
    """Replace characters that are illegal in file names with '_'"""
    return UNSAFE_FILENAME_CHARS.sub('_', value or '')
