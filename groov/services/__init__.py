"""Services package exports."""

from groov.services.credential_store import CredentialStore, PostgresCredentialStore
from groov.services.logging_service import configure_logging, get_logger
from groov.services.password_service import PasswordService
from groov.services.session_service import SessionService
from groov.services.token_service import TokenService

__all__ = [
    "CredentialStore",
    "PasswordService",
    "PostgresCredentialStore",
    "SessionService",
    "TokenService",
    "configure_logging",
    "get_logger",
]
