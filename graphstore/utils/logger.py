from loguru import logger
from pathlib import Path
import sys

from ..config import settings


def setup_logging(log_level: str = "INFO", log_file: str = "logs/app.log"):
    """Setup logging configuration."""
    # Remove default logger
    logger.remove()
    
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    
    # Console logger
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[component]}</cyan> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=log_level.upper(),
        colorize=True,
    )
    
    # File logger
    logger.add(
        log_file,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | {name}:{function}:{line} - {message}",
        level=log_level.upper(),
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )
    
    # Records logged without bind() still need a component for the format
    logger.configure(extra={"component": "app"})
    
    return logger


app_logger = setup_logging(settings.log_level, settings.log_file)
