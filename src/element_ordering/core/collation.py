"""
Collation keys for alphabetical and natural comparison.

Without a configured locale, keys follow a locale-independent Unicode
ordering: accents and case only break ties, and lower case sorts before
upper case. A configured locale is resolved through the C library collation
tables; switching ``LC_COLLATE`` is serialised and always restored so that
evaluations stay free of side effects.
"""

import locale
import logging
import threading
import unicodedata
from functools import lru_cache

logger = logging.getLogger(__name__)

_locale_lock = threading.Lock()


def default_collation_key(value: str) -> tuple[str, str, str]:
    """Locale-independent collation key (base letters, accents, case)."""
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (base.casefold(), decomposed.casefold(), value.swapcase())


def _locale_candidates(name: str) -> list[str]:
    normalized = name.replace("-", "_")
    candidates = [name, normalized]
    if "." not in normalized:
        candidates.extend([f"{normalized}.UTF-8", f"{normalized}.utf8"])
    return list(dict.fromkeys(candidates))


@lru_cache(maxsize=64)
def resolve_locale(name: str) -> str | None:
    """Return the C library locale name for ``name``, or None if unavailable."""
    with _locale_lock:
        previous = locale.setlocale(locale.LC_COLLATE)
        try:
            for candidate in _locale_candidates(name):
                try:
                    locale.setlocale(locale.LC_COLLATE, candidate)
                except locale.Error:
                    continue
                return candidate
        finally:
            locale.setlocale(locale.LC_COLLATE, previous)
    logger.debug(f"Locale {name!r} is not available")
    return None


@lru_cache(maxsize=4096)
def _locale_key(locale_name: str, value: str) -> str:
    with _locale_lock:
        previous = locale.setlocale(locale.LC_COLLATE)
        try:
            locale.setlocale(locale.LC_COLLATE, locale_name)
            return locale.strxfrm(value)
        finally:
            locale.setlocale(locale.LC_COLLATE, previous)


def collation_key(value: str, locale_name: str | None = None):
    """Collation key for ``value`` under an optional locale.

    Args:
        value: Already formatted sort key
        locale_name: Locale requested by the configuration, or None

    Returns:
        A value usable with ``<`` against keys built with the same locale
    """
    if not locale_name:
        return default_collation_key(value)
    resolved = resolve_locale(locale_name)
    if resolved is None:
        return default_collation_key(value)
    return (_locale_key(resolved, value), default_collation_key(value))
