"""Account service orchestrating credential checks, persistence, and token issuance."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .account import Account, normalize_email
from .errors import ConflictError, UnauthorizedError
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenIssuer
from ..store.base import RecordStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid email or password"
INVALID_SESSION = "invalid or expired token"


def _mask_email(email: str) -> str:
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}"


@dataclass(slots=True)
class AuthResult:
    """Session token handed back together with the authenticated account."""

    token: str
    account: Account


class AccountService:
    """Registration, login, and token-to-account resolution."""

    def __init__(self, store: RecordStore, hasher: PasswordHasher, tokens: TokenIssuer) -> None:
        """Store collaborators and precompute the digest used to equalise failed lookups."""
        self._store = store
        self._hasher = hasher
        self._tokens = tokens
        self._dummy_digest = hasher.hash("")

    @property
    def tokens(self) -> TokenIssuer:
        return self._tokens

    def register(self, email: str, password: str) -> AuthResult:
        """Create an account and issue its first token.

        Raises
        ------
        ConflictError
            If an account already exists for the normalized email.
        StorageError
            If persistence fails; no token is issued in that case.
        """
        normalized = normalize_email(email)
        if self._store.find_account_by_email(normalized) is not None:
            raise ConflictError("email already registered")
        account = self._store.create_account(normalized, self._hasher.hash(password))
        logger.info("registered account %s (%s)", account.account_id, _mask_email(account.email))
        return AuthResult(token=self._tokens.issue(account.account_id, account.email), account=account)

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate by email and password.

        Unknown emails and wrong passwords raise the same ``UnauthorizedError``.
        """
        account = self._store.find_account_by_email(email)
        if account is None:
            # same bcrypt work as a real check so timing does not reveal registration
            self._hasher.verify(password, self._dummy_digest)
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not self._hasher.verify(password, account.credential_hash):
            logger.info("failed login for account %s", account.account_id)
            raise UnauthorizedError(INVALID_CREDENTIALS)
        logger.info("account %s logged in", account.account_id)
        return AuthResult(token=self._tokens.issue(account.account_id, account.email), account=account)

    def identify(self, token: str) -> Account:
        """Resolve a session token to the account it names, as currently stored."""
        claims = self._tokens.verify(token)
        if claims is None:
            raise UnauthorizedError(INVALID_SESSION)
        account = self._store.find_account_by_id(claims.account_id)
        if account is None:
            raise UnauthorizedError(INVALID_SESSION)
        return account
