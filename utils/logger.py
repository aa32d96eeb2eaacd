import logging
import os
from typing import Optional

from colorama import Fore, init

init(autoreset=True)

from tqdm import tqdm


def setup_logger(
    name="scraper", level=logging.INFO, log_file="data/logs/scrape.log", console=True
):
    """Setup logger with file and console handlers"""

    # Create logs directory if not exists
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.hasHandlers():
        logger.handlers.clear()

    # File handler
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    # Console handler
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(message)s"
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    return logger


def colored_print(level: str, message: str, color: str = Fore.WHITE):
    """Print colored message to console"""
    colors = {
        "INFO": Fore.BLUE,
        "SUCCESS": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "DEBUG": Fore.CYAN,
    }
    print(f"{colors.get(color, color) or colors.get(level, Fore.WHITE)}{message}")


def create_progress_bar(iterable, desc="Progress", unit="it", disable=False):
    """Create tqdm progress bar"""
    return tqdm(iterable, desc=desc, unit=unit, colour="green", disable=disable)


def log_scraping_step(step: str, url: Optional[str] = None, details: str = ""):
    """Log scraping steps with colors"""
    if url is not None:
        colored_print("INFO", f"Step: {step} - {url}", Fore.CYAN)
    else:
        colored_print("INFO", f"Step: {step}", Fore.CYAN)
    if details:
        print(details)

