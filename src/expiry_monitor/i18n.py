"""
Internationalization (i18n) module for the expiry monitor.

Provides translations for all user-facing CLI messages in German (de) and
English (en).
"""

from typing import Optional


SUPPORTED_LANGUAGES = frozenset({"de", "en"})
DEFAULT_LANGUAGE = "en"


# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Stats
    "stats.total": {
        "de": "Domains gesamt",
        "en": "Total Domains",
    },
    "stats.active": {
        "de": "Aktiv",
        "en": "Active",
    },
    "stats.errors": {
        "de": "Fehler",
        "en": "Errors",
    },
    "stats.expiring_soon": {
        "de": "Läuft bald ab",
        "en": "Expiring Soon",
    },
    "warning.expiring_soon": {
        "de": "{count} Domain(s) laufen in weniger als 30 Tagen ab!",
        "en": "{count} domain(s) are expiring in less than 30 days!",
    },

    # Empty states
    "empty.no_domains": {
        "de": "Füge deine erste Domain hinzu, um zu starten",
        "en": "Add your first domain to get started",
    },
    "empty.no_matches": {
        "de": "Passe deine Suchfilter an",
        "en": "Try adjusting your search filters",
    },

    # Record rows
    "status.pending": {
        "de": "Lädt...",
        "en": "Loading...",
    },
    "status.resolved": {
        "de": "Erfolgreich",
        "en": "success",
    },
    "status.failed": {
        "de": "Fehler",
        "en": "error",
    },
    "status.deleting": {
        "de": "Wird gelöscht...",
        "en": "Deleting...",
    },
    "expiry.expired": {
        "de": "Abgelaufen",
        "en": "Expired",
    },
    "expiry.days": {
        "de": "{days} Tage",
        "en": "{days} days",
    },
    "expiry.unknown": {
        "de": "-",
        "en": "-",
    },
    "row.ips": {
        "de": "{count} IP(s)",
        "en": "{count} IP(s)",
    },
    "row.ns": {
        "de": "{count} NS",
        "en": "{count} NS",
    },
    "row.header": {
        "de": "ID | Domain | Status | DNS | NS | Ausgestellt | Zertifikat läuft ab | Domain läuft ab | Verbleibend",
        "en": "ID | Domain | Status | DNS | NS | Issued | Certificate expires | Domain expires | Remaining",
    },

    # Commands
    "cli.loading": {
        "de": "SSL-Zertifikatsdaten für alle Domains werden abgerufen...",
        "en": "Fetching SSL certificate data for all domains...",
    },
    "cli.load_failed": {
        "de": "Domainliste konnte nicht geladen werden: {error}",
        "en": "Failed to fetch domain list: {error}",
    },
    "cli.added": {
        "de": "Domain {domain} hinzugefügt (ID {id})",
        "en": "Added domain {domain} (id {id})",
    },
    "cli.add_failed": {
        "de": "Domain konnte nicht hinzugefügt werden: {error}",
        "en": "Failed to add domain: {error}",
    },
    "cli.removed": {
        "de": "Domain {id} gelöscht",
        "en": "Deleted domain {id}",
    },
    "cli.remove_failed": {
        "de": "Domain konnte nicht gelöscht werden: {error}",
        "en": "Failed to delete domain: {error}",
    },
    "cli.refreshed": {
        "de": "Domain {domain} aktualisiert",
        "en": "Refreshed domain {domain}",
    },
    "cli.refresh_failed": {
        "de": "Domain konnte nicht aktualisiert werden: {error}",
        "en": "Failed to refresh domain: {error}",
    },
    "cli.test_email_failed": {
        "de": "Test-E-Mail konnte nicht gesendet werden: {error}",
        "en": "Failed to send test email: {error}",
    },

    # Configuration
    "config.not_found": {
        "de": "Keine Konfiguration gefunden unter: {path}",
        "en": "No configuration found at: {path}",
    },
    "config.exists": {
        "de": "Konfiguration existiert bereits unter: {path} (--force zum Überschreiben)",
        "en": "Configuration already exists at: {path} (use --force to overwrite)",
    },
    "config.created": {
        "de": "Konfiguration erstellt unter: {path}",
        "en": "Configuration created at: {path}",
    },
    "config.valid": {
        "de": "Konfiguration unter {path} ist gültig.",
        "en": "Configuration at {path} is valid.",
    },
    "config.invalid": {
        "de": "Konfiguration konnte nicht geladen werden: {error}",
        "en": "Could not load configuration: {error}",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'empty.no_domains')
        language: Language code ('de' or 'en'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.
        If the language is not found, falls back to DEFAULT_LANGUAGE.

    Examples:
        >>> get_message('expiry.days', 'en', days=3)
        '3 days'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language)
    if message is None:
        message = translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            pass

    return message


def get_all_message_keys() -> set[str]:
    """Get all available message keys."""
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    """Check if a translation exists for a key and language."""
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """
    Get all message keys that are missing translations for a language.

    Args:
        language: The language code to check

    Returns:
        Set of message keys missing translations for the specified language.
    """
    missing = set()
    for key, translations in TRANSLATIONS.items():
        if language not in translations:
            missing.add(key)
    return missing


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
        Empty sets indicate complete translations.
    """
    return {language: get_missing_translations(language) for language in SUPPORTED_LANGUAGES}
