"""One-time initialisation of the cryptographic backend."""

import threading

from cryptography.hazmat.backends import default_backend

from compactjwt.core.logging import get_logger

logger = get_logger(__name__)

_lock = threading.Lock()
_version_text: str | None = None


def init_crypto_backend() -> str:
    """Load the OpenSSL backend once per process and return its version text.

    Safe to call from any number of threads; only the first caller does the
    work, later calls return the cached version.
    """
    global _version_text
    if _version_text is not None:
        return _version_text
    with _lock:
        if _version_text is None:
            _version_text = default_backend().openssl_version_text()
            logger.debug("Crypto backend initialised", openssl=_version_text)
    return _version_text
