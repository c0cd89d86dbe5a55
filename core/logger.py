"""
Configure the logger
"""

import logging
import re
from core.config import get_settings

logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def mask_uri(uri: str) -> str:
    """Mask the password in a database URI before logging it"""
    return re.sub(r"://(.*?):(.*?)@", r"://\1:*****@", uri)


def set_verbose(verbose: bool):
    """Show debugging messages from every logger"""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
