"""Username/password credential gate with per-account lockout.

Secrets (passwords and security answers) are stored as salted scrypt
digests. After ``max_attempts`` consecutive failures an account is locked
for ``lockout``; while locked, attempts are refused without checking the
password. Only a successful login clears the failure counter, so the first
failure after a lock expires locks the account again.
"""

import hashlib
import hmac
import logging
import math
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import NoReturn

from voyage.db.repositories import AccountRecord, AccountRepository
from voyage.errors import (
    AccountExistsError,
    AccountLockedError,
    AccountNotFoundError,
    AuthValidationError,
    InvalidCredentialsError,
    SecurityAnswerError,
)
from voyage.utils.metrics import PrometheusSyncMetrics

logger = logging.getLogger(__name__)

MAX_LOGIN_ATTEMPTS = 5
LOCKOUT_DURATION = timedelta(minutes=5)
# Upper bound on failure counters kept for usernames that are not registered
MAX_TRACKED_UNKNOWN = 10_000

SECURITY_QUESTIONS = (
    "您的第一所國小是？",
    "您母親的娘家在哪裡？",
    "您最喜歡的食物是？",
    "您的第一隻寵物名字是？",
    "您最喜歡的歌手是？",
)

_SCRYPT_N = 2**14
_SCRYPT_R = 8
_SCRYPT_P = 1


def hash_secret(secret: str, salt: bytes | None = None) -> tuple[str, str]:
    """Salted scrypt digest.

    Returns:
        (digest_hex, salt_hex)
    """
    if salt is None:
        salt = os.urandom(16)
    digest = hashlib.scrypt(
        secret.encode("utf-8"), salt=salt, n=_SCRYPT_N, r=_SCRYPT_R, p=_SCRYPT_P
    )
    return digest.hex(), salt.hex()


def verify_secret(secret: str, digest_hex: str, salt_hex: str) -> bool:
    """Constant-time check of ``secret`` against a stored digest."""
    if not digest_hex or not salt_hex:
        return False
    candidate, _ = hash_secret(secret, bytes.fromhex(salt_hex))
    return hmac.compare_digest(candidate, digest_hex)


@dataclass
class _Attempts:
    count: int = 0
    locked_until: datetime | None = None


class CredentialGate:
    """Register / login / change-password / forgot-password flows."""

    def __init__(
        self,
        accounts: AccountRepository,
        max_attempts: int = MAX_LOGIN_ATTEMPTS,
        lockout: timedelta = LOCKOUT_DURATION,
        max_tracked_unknown: int = MAX_TRACKED_UNKNOWN,
    ) -> None:
        self._accounts = accounts
        self._max_attempts = max_attempts
        self._lockout = lockout
        self._max_tracked_unknown = max_tracked_unknown
        # Failures for names that are not registered, so unknown and known
        # usernames behave the same way. Oldest first; pruned on every use.
        self._unknown: dict[str, _Attempts] = {}
        self._metrics = PrometheusSyncMetrics()

    async def register(
        self, username: str, password: str, security_question: str, security_answer: str
    ) -> AccountRecord:
        """Create an account.

        Raises:
            AuthValidationError: A field is blank
            AccountExistsError: Username taken
        """
        username = username.strip()
        if not username or not password or not security_question.strip() or not security_answer:
            raise AuthValidationError(
                "username, password, security question and answer are required"
            )

        if await self._accounts.get(username) is not None:
            raise AccountExistsError(username)

        password_hash, password_salt = hash_secret(password)
        answer_hash, answer_salt = hash_secret(security_answer)
        account = AccountRecord(
            user_id=uuid.uuid4(),
            username=username,
            password_hash=password_hash,
            password_salt=password_salt,
            security_question=security_question.strip(),
            answer_hash=answer_hash,
            answer_salt=answer_salt,
        )
        await self._accounts.add(account)
        logger.info("Account registered", extra={"structured": {"username": username}})
        return account

    def _prune_unknown(self, now: datetime) -> None:
        """Drop counters whose lock has expired, then the oldest beyond the cap."""
        expired = [
            name
            for name, attempts in self._unknown.items()
            if attempts.locked_until is not None and attempts.locked_until <= now
        ]
        for name in expired:
            del self._unknown[name]
        while len(self._unknown) >= self._max_tracked_unknown:
            del self._unknown[next(iter(self._unknown))]

    def _check_lock(self, locked_until: datetime | None, now: datetime) -> None:
        if locked_until is not None and locked_until > now:
            minutes = math.ceil((locked_until - now) / timedelta(minutes=1))
            self._metrics.record_login("locked")
            raise AccountLockedError(minutes)

    def _register_failure(self, attempts: _Attempts, now: datetime) -> None:
        attempts.count += 1
        if attempts.count >= self._max_attempts:
            attempts.locked_until = now + self._lockout

    def _raise_failure(self, attempts: _Attempts, now: datetime) -> NoReturn:
        if attempts.locked_until is not None and attempts.locked_until > now:
            self._metrics.record_login("locked")
            raise AccountLockedError(math.ceil(self._lockout / timedelta(minutes=1)))
        self._metrics.record_login("failure")
        raise InvalidCredentialsError(self._max_attempts - attempts.count)

    async def login(
        self, username: str, password: str, now: datetime | None = None
    ) -> AccountRecord:
        """Check credentials.

        Raises:
            AuthValidationError: Blank username or password
            AccountLockedError: Account is in its cooldown (credentials not checked)
            InvalidCredentialsError: Wrong username or password
        """
        if now is None:
            now = datetime.now()

        username = username.strip()
        if not username:
            raise AuthValidationError("username and password are required")

        account = await self._accounts.get(username)
        if account is None:
            attempts = self._unknown.get(username)
            if attempts is None:
                self._prune_unknown(now)
                attempts = self._unknown.setdefault(username, _Attempts())
            self._check_lock(attempts.locked_until, now)
            if not password:
                raise AuthValidationError("username and password are required")
            self._register_failure(attempts, now)
            self._raise_failure(attempts, now)

        self._check_lock(account.locked_until, now)
        if not password:
            raise AuthValidationError("username and password are required")

        if verify_secret(password, account.password_hash, account.password_salt):
            account.failed_attempts = 0
            account.locked_until = None
            await self._accounts.save(account)
            self._metrics.record_login("success")
            return account

        attempts = _Attempts(account.failed_attempts, account.locked_until)
        self._register_failure(attempts, now)
        account.failed_attempts = attempts.count
        account.locked_until = attempts.locked_until
        await self._accounts.save(account)
        logger.warning(
            "Login failed",
            extra={"structured": {"username": username, "failed_attempts": attempts.count}},
        )
        self._raise_failure(attempts, now)

    async def change_password(self, username: str, old_password: str, new_password: str) -> None:
        """Replace the password after verifying the old one.

        Raises:
            AuthValidationError: A field is blank
            AccountNotFoundError: Unknown username
            InvalidCredentialsError: Old password is wrong
        """
        if not username or not old_password or not new_password:
            raise AuthValidationError("username, old password and new password are required")

        account = await self._require(username)
        if not verify_secret(old_password, account.password_hash, account.password_salt):
            raise InvalidCredentialsError(self._max_attempts - account.failed_attempts)

        account.password_hash, account.password_salt = hash_secret(new_password)
        await self._accounts.save(account)

    async def security_question(self, username: str) -> str:
        """Question to show in the forgot-password flow.

        Raises:
            AccountNotFoundError: Unknown username
            SecurityAnswerError: Account has no security question
        """
        account = await self._require(username)
        if not account.security_question or not account.answer_hash:
            raise SecurityAnswerError(
                "account has no security question; password cannot be reset"
            )
        return account.security_question

    async def reset_password(self, username: str, security_answer: str, new_password: str) -> None:
        """Set a new password after a correct security answer.

        Raises:
            AuthValidationError: A field is blank
            AccountNotFoundError: Unknown username
            SecurityAnswerError: Wrong answer or no question set
        """
        if not username or not security_answer or not new_password:
            raise AuthValidationError("username, security answer and new password are required")

        account = await self._require(username)
        if not verify_secret(security_answer, account.answer_hash, account.answer_salt):
            raise SecurityAnswerError("security answer does not match")

        account.password_hash, account.password_salt = hash_secret(new_password)
        await self._accounts.save(account)

    async def _require(self, username: str) -> AccountRecord:
        account = await self._accounts.get(username.strip())
        if account is None:
            raise AccountNotFoundError(username)
        return account
