"""
Service d'envoi de SMS via Twilio.

Hors production, l'absence d'identifiants Twilio n'est pas une erreur :
le message est journalisé au lieu d'être envoyé.
"""

import logging

from twilio.rest import Client

from app.config import settings

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    return settings.sms_configured


def send_sms(to: str, message: str) -> None:
    """
    Envoie un SMS. Lève une exception en cas d'échec Twilio, ou si Twilio
    n'est pas configuré en production.
    """
    if not to:
        raise ValueError("Numéro de téléphone du destinataire manquant.")

    if not settings.sms_configured:
        if not settings.is_production:
            logger.warning("Twilio non configuré ; SMS non envoyé. Aperçu → %s : %s", to, message)
            return
        raise RuntimeError("Configuration Twilio manquante.")

    client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
    sent = client.messages.create(to=to, from_=settings.TWILIO_FROM_NUMBER, body=message)
    logger.info("SMS envoyé à %s (sid : %s)", to, sent.sid)
