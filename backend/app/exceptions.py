"""
Erreurs métier typées levées par les services.

Chaque erreur porte le code HTTP vers lequel main.py la traduit, ce qui permet
aux routers d'appeler les services sans try/except : Forbidden, NotFound et
Conflict restent distinguables jusqu'au client.
"""


class AppError(Exception):
    """Erreur métier de base."""
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class UnauthorizedError(AppError):
    """Acteur absent ou jeton invalide."""
    status_code = 401


class ForbiddenError(AppError):
    """Acteur authentifié mais hors de son périmètre ou sans le rôle requis."""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Violation d'unicité (présence en double, email déjà utilisé...)."""
    status_code = 409


class BusinessRuleError(AppError):
    """Invariant dépendant de l'état (ex. présence non approuvée)."""
    status_code = 400


class ServiceUnavailableError(AppError):
    """Canal de livraison (SMS / email) non configuré ou en échec."""
    status_code = 503
