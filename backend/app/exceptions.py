"""
Erreurs métier typées levées par les services.

Chaque erreur porte un `kind` (tag renvoyé au client) et un code HTTP.
Le rendu JSON est fait par le handler enregistré dans app.main.
"""


class CheckInError(Exception):
    """Base de toutes les erreurs métier du check-in et de la facturation."""

    kind = "Error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(CheckInError):
    """Entrée manquante ou mal formée : faute de l'appelant, ne pas réessayer."""

    kind = "ValidationError"
    status_code = 400


class AlreadyInvoicedError(InvalidInputError):
    """Le check-in est déjà facturé (billing_status = success)."""

    status_code = 409


class NotFoundError(CheckInError):
    """Code, check-in, client ou type de séance introuvable."""

    kind = "NotFound"
    status_code = 404


class NoStudentsFoundError(CheckInError):
    """Le client n'a aucun élève : intervention d'un opérateur nécessaire."""

    kind = "NoStudentsFound"
    status_code = 400


class DependencyUnavailableError(CheckInError):
    """Base de données ou grand livre injoignable, réessayable avec backoff."""

    kind = "DependencyUnavailable"
    status_code = 503


class BillingRejectedError(CheckInError):
    """Le grand livre a refusé la facture : re-synchronisation manuelle uniquement."""

    kind = "BillingRejected"
    status_code = 502
