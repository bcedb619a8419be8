"""
Planificateur APScheduler pour la maintenance des jetons de réinitialisation.

Le job s'exécute toutes les heures et supprime les jetons expirés ou déjà utilisés.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _purge_reset_tokens_scheduled() -> None:
    """
    Tâche planifiée : purge des jetons de réinitialisation inutilisables.
    Import local pour éviter les imports circulaires.
    """
    from app.services.password_reset_service import purge_expired_tokens

    db = SessionLocal()
    try:
        removed = purge_expired_tokens(db)
        if removed:
            logger.info("Purge des jetons de réinitialisation : %d supprimé(s)", removed)
    except Exception as exc:
        db.rollback()
        logger.error("Erreur lors de la purge des jetons de réinitialisation : %s", exc)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _purge_reset_tokens_scheduled,
        trigger="interval",
        hours=1,
        id="password_reset_token_purge",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler démarré — purge des jetons de réinitialisation toutes les heures.")


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
