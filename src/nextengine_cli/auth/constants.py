"""Shared authentication constants and utilities."""

import fcntl
import logging
import time
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

# Sign-in form fields
AUTHENTICITY_TOKEN_FIELD = "authenticity_token"
LOGIN_CODE_FIELD = "user[login_code]"
PASSWORD_FIELD = "user[password]"

# File locking
STATE_LOCK_TIMEOUT_SEC = 30


@contextmanager
def state_file_lock(lock_path: Path, timeout: int = STATE_LOCK_TIMEOUT_SEC):
    """Context manager for exclusive access to the cookie jar and token cache.

    Prevents two CLI processes from interleaving a login sequence or
    overwriting each other's tokens.

    Usage:
        with state_file_lock(settings.lock_file):
            ...

    Raises:
        TimeoutError: If lock cannot be acquired within timeout
    """
    lock_path = Path(lock_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    with open(lock_path, "w") as lock_file:
        start_time = time.time()
        while True:
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                logger.debug(f"Acquired state lock {lock_path}")
                break
            except BlockingIOError:
                if time.time() - start_time >= timeout:
                    raise TimeoutError(
                        f"Could not acquire state lock {lock_path} after {timeout}s. "
                        "Another process may be calling the API."
                    )
                time.sleep(0.1)

        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            logger.debug(f"Released state lock {lock_path}")
