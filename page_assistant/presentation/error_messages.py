"""User-facing, localized messages for pipeline failures."""

from __future__ import annotations

from page_assistant.core.lang import LANG_EN
from page_assistant.domain.exceptions.domain_exceptions import (
    AssistantError,
    ExtractionError,
    InvalidCredentialsError,
    MissingCredentialsError,
    RateLimitedError,
    SecretDecodeError,
    UnreachableError,
    UpstreamUnavailableError,
)

ERROR_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "api_key_missing": "API key not configured. Please set it in extension options.",
        "invalid_api_key": "Invalid API key. Please check your configuration.",
        "rate_limited": "Rate limit exceeded. Please try again later.",
        "unavailable": "Service temporarily unavailable. Please try again later.",
        "network": "Network error. Check your internet connection.",
        "fetch_failed": "Unable to contact server. Check your connection.",
    },
    "fr": {
        "api_key_missing": (
            "Clé API non configurée. Veuillez la configurer dans les options de l'extension."
        ),
        "invalid_api_key": "Clé API invalide. Veuillez vérifier votre configuration.",
        "rate_limited": "Limite de requêtes dépassée. Veuillez réessayer plus tard.",
        "unavailable": "Service temporairement indisponible. Veuillez réessayer plus tard.",
        "network": "Erreur réseau. Vérifiez votre connexion internet.",
        "fetch_failed": "Impossible de contacter le serveur. Vérifiez votre connexion.",
    },
    "es": {
        "api_key_missing": (
            "Clave API no configurada. Por favor, configúrela en las opciones de la extensión."
        ),
        "invalid_api_key": "Clave API inválida. Por favor, verifique su configuración.",
        "rate_limited": "Límite de solicitudes excedido. Intente de nuevo más tarde.",
        "unavailable": "Servicio temporalmente no disponible. Intente de nuevo más tarde.",
        "network": "Error de red. Verifique su conexión a internet.",
        "fetch_failed": "No se puede contactar el servidor. Verifique su conexión.",
    },
    "de": {
        "api_key_missing": (
            "API-Schlüssel nicht konfiguriert. Bitte in den Erweiterungsoptionen festlegen."
        ),
        "invalid_api_key": "Ungültiger API-Schlüssel. Bitte überprüfen Sie Ihre Konfiguration.",
        "rate_limited": "Anfragelimit überschritten. Bitte versuchen Sie es später erneut.",
        "unavailable": (
            "Service vorübergehend nicht verfügbar. Bitte versuchen Sie es später erneut."
        ),
        "network": "Netzwerkfehler. Überprüfen Sie Ihre Internetverbindung.",
        "fetch_failed": (
            "Server konnte nicht kontaktiert werden. Überprüfen Sie Ihre Verbindung."
        ),
    },
    "it": {
        "api_key_missing": (
            "Chiave API non configurata. Configurala nelle opzioni dell'estensione."
        ),
        "invalid_api_key": "Chiave API non valida. Controlla la configurazione.",
        "rate_limited": "Limite di richieste superato. Riprova più tardi.",
        "unavailable": "Servizio temporaneamente non disponibile. Riprova più tardi.",
        "network": "Errore di rete. Controlla la connessione internet.",
        "fetch_failed": "Impossibile contattare il server. Controlla la connessione.",
    },
    "pt": {
        "api_key_missing": "Chave API não configurada. Configure nas opções da extensão.",
        "invalid_api_key": "Chave API inválida. Verifique sua configuração.",
        "rate_limited": "Limite de solicitações excedido. Tente novamente mais tarde.",
        "unavailable": "Serviço temporariamente indisponível. Tente novamente mais tarde.",
        "network": "Erro de rede. Verifique sua conexão com a internet.",
        "fetch_failed": "Não foi possível contactar o servidor. Verifique sua conexão.",
    },
    "nl": {
        "api_key_missing": "API-sleutel niet geconfigureerd. Stel deze in bij extensie-opties.",
        "invalid_api_key": "Ongeldige API-sleutel. Controleer uw configuratie.",
        "rate_limited": "Aanvraaglimiet overschreden. Probeer het later opnieuw.",
        "unavailable": "Service tijdelijk niet beschikbaar. Probeer het later opnieuw.",
        "network": "Netwerkfout. Controleer uw internetverbinding.",
        "fetch_failed": "Kan server niet bereiken. Controleer uw verbinding.",
    },
}

# Checked in order; subclasses before their bases.
_ERROR_KINDS: tuple[tuple[type[BaseException], str], ...] = (
    (MissingCredentialsError, "api_key_missing"),
    (SecretDecodeError, "api_key_missing"),
    (InvalidCredentialsError, "invalid_api_key"),
    (RateLimitedError, "rate_limited"),
    (UpstreamUnavailableError, "unavailable"),
    (UnreachableError, "network"),
    (ExtractionError, "fetch_failed"),
)


def error_kind(exc: BaseException) -> str | None:
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(exc, exc_type):
            return kind
    return None


def localize_error(exc: BaseException, language: str = LANG_EN) -> str:
    """Return a message for ``exc`` in ``language`` (English when unavailable).

    Errors without a curated message are shown with their own message text.
    """
    messages = ERROR_MESSAGES.get(str(language or "").lower()[:2], ERROR_MESSAGES[LANG_EN])
    kind = error_kind(exc)
    if kind is not None:
        return messages[kind]
    if isinstance(exc, AssistantError):
        return exc.message
    return str(exc)
