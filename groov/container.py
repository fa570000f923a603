"""Composition root: one instance of every collaborator, built at startup."""

from dataclasses import dataclass
from typing import Optional

import asyncpg

from groov.config import Settings
from groov.services.credential_store import CredentialStore, PostgresCredentialStore
from groov.services.password_service import PasswordService
from groov.services.session_service import SessionService
from groov.services.token_service import TokenService


@dataclass(frozen=True)
class Container:
    """Dependency graph handed to the HTTP layer via app.state.

    ``pool`` is None when the store is not database-backed.
    """

    settings: Settings
    store: CredentialStore
    passwords: PasswordService
    tokens: TokenService
    sessions: SessionService
    pool: Optional[asyncpg.Pool] = None


def build_container(settings: Settings, pool: asyncpg.Pool) -> Container:
    """Wire the services once configuration is loaded and the pool is open."""
    store = PostgresCredentialStore(pool)
    return build_container_with_store(settings, store, pool=pool)


def build_container_with_store(
    settings: Settings,
    store: CredentialStore,
    pool: Optional[asyncpg.Pool] = None,
) -> Container:
    passwords = PasswordService(rounds=settings.bcrypt_rounds)
    tokens = TokenService(
        access_secret=settings.access_token_secret,
        refresh_secret=settings.refresh_token_secret,
    )
    sessions = SessionService(store=store, passwords=passwords, tokens=tokens)
    return Container(
        settings=settings,
        store=store,
        passwords=passwords,
        tokens=tokens,
        sessions=sessions,
        pool=pool,
    )
