# realleads/common/bootstrap_env.py
from __future__ import annotations
import logging

from dotenv import load_dotenv, find_dotenv

logger = logging.getLogger(__name__)

def bootstrap_env() -> str:
    """
    Load .env from the working tree (or the nearest parent that has one).
    Only fills missing vars; values already set in the shell/CI win.
    Returns the path that was loaded, or "" when none was found.
    """
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path, override=False)
        logger.debug("EnvLoaded", extra={"path": path})
    return path
