"""Localized user-facing messages."""

import logging

from .consts import NETWORK_ERROR_KEY, REQUEST_TIMEOUT_KEY, SESSION_EXPIRED_KEY
from .protocols import Translator

logger = logging.getLogger("allocation-client.messages")

CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        SESSION_EXPIRED_KEY: "Your session has expired. Please log in again.",
        NETWORK_ERROR_KEY: "Network error. Please check your connection.",
        REQUEST_TIMEOUT_KEY: "The request timed out. Please try again.",
    },
    "de": {
        SESSION_EXPIRED_KEY: "Ihre Sitzung ist abgelaufen. Bitte melden Sie sich erneut an.",
        NETWORK_ERROR_KEY: "Netzwerkfehler. Bitte überprüfen Sie Ihre Verbindung.",
        REQUEST_TIMEOUT_KEY: "Zeitüberschreitung der Anfrage. Bitte versuchen Sie es erneut.",
    },
}

FALLBACK_LANGUAGE = "en"


def get_translator(language: str = FALLBACK_LANGUAGE) -> Translator:
    """Build a lookup function for the given language.

    Unknown languages fall back to English; unknown keys come back unchanged.
    """
    if language not in CATALOGS:
        logger.warning(f"No message catalog for '{language}', using English")
    catalog = {**CATALOGS[FALLBACK_LANGUAGE], **CATALOGS.get(language, {})}

    def translate(key: str) -> str:
        return catalog.get(key, key)

    return translate
