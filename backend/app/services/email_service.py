"""
Service d'envoi d'emails SMTP.
Utilisé pour les liens de réinitialisation de mot de passe des administrateurs.
"""

import logging
import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Iterable, Optional, Tuple

from app.config import settings

logger = logging.getLogger(__name__)

# (nom de fichier, contenu, sous-type MIME)
Attachment = Tuple[str, bytes, str]


def is_configured() -> bool:
    return settings.email_configured


def send_email(
    to: str,
    subject: str,
    text: str,
    html: Optional[str] = None,
    attachments: Optional[Iterable[Attachment]] = None,
) -> None:
    """
    Envoie un email texte (+ HTML et pièces jointes optionnels).
    Sans identifiants SMTP hors production : journalise et n'envoie rien.
    Lève une exception en cas d'échec SMTP.
    """
    if not settings.email_configured:
        if not settings.is_production:
            logger.warning("SMTP non configuré ; email non envoyé. Aperçu → %s : %s", to, subject)
            return
        raise RuntimeError("Configuration SMTP manquante.")

    msg = MIMEMultipart("mixed")
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to
    msg["Subject"] = subject

    body = MIMEMultipart("alternative")
    body.attach(MIMEText(text, "plain", "utf-8"))
    if html:
        body.attach(MIMEText(html, "html", "utf-8"))
    msg.attach(body)

    for filename, content, subtype in attachments or ():
        part = MIMEApplication(content, _subtype=subtype, Name=filename)
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    # Connexion SMTP et envoi
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
        if settings.SMTP_USE_TLS:
            server.starttls()
        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)

    logger.info("Email envoyé à %s : %s", to, subject)


def send_password_reset_email(to: str, reset_link: str, expires_in_minutes: int) -> None:
    """Envoie le lien de réinitialisation de mot de passe d'un administrateur."""
    subject = "Umuganda SDA — Réinitialisation de votre mot de passe"
    text = (
        "Une réinitialisation de mot de passe a été demandée pour votre compte.\n"
        f"Suivez ce lien dans les {expires_in_minutes} minutes : {reset_link}\n"
        "Si vous n'êtes pas à l'origine de cette demande, ignorez ce message."
    )
    html = f"""
    <html>
      <body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: auto;">
        <h2 style="color: #1a73e8;">Umuganda SDA — Mot de passe</h2>
        <p>Une réinitialisation de mot de passe a été demandée pour votre compte.</p>
        <p style="text-align: center; margin: 24px 0;">
          <a href="{reset_link}" style="background: #1a73e8; color: #fff; padding: 12px 20px;
             text-decoration: none; border-radius: 4px;">Choisir un nouveau mot de passe</a>
        </p>
        <p>Ce lien expire dans <strong>{expires_in_minutes} minutes</strong>.</p>
        <hr style="border: none; border-top: 1px solid #eee;" />
        <p style="font-size: 12px; color: #888;">
          Si vous n'êtes pas à l'origine de cette demande, ignorez ce message.
        </p>
      </body>
    </html>
    """
    send_email(to, subject, text, html=html)
