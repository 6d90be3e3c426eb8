"""Session layer: registration, sign-in and the current principal.

Credentials live in their own ``credentials`` collection so that account
records never carry secrets. Passwords and PINs are stored as salted
PBKDF2 hashes.
"""

import hashlib
import hmac
import os
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from swiftpay.constants import (
    ACCOUNTS,
    CENTS,
    CREDENTIALS,
    DEFAULT_PASSWORD_MIN_LENGTH,
    DEFAULT_STARTING_BALANCE,
    PIN_LENGTH,
    Role,
)
from swiftpay.ledger.ids import MonotonicIdGenerator, default_id_generator
from swiftpay.models import Account, VendorInfo
from swiftpay.session.principal import Principal
from swiftpay.store import RecordStore, load_models, dump_models
from swiftpay.utils.config_loader import get_section
from swiftpay.utils.errors import (
    AuthenticationError,
    DuplicateError,
    NotFoundError,
    ValidationFailedError,
)
from swiftpay.utils.logging import get_logger
from swiftpay.utils.metrics import account_registrations, authentication_attempts

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PIN_PATTERN = re.compile(rf"^\d{{{PIN_LENGTH}}}$")


class SessionManager:
    """Single in-process session over the record store"""

    def __init__(self, store: RecordStore, config: Optional[Dict[str, Any]] = None,
                 id_generator: Optional[MonotonicIdGenerator] = None):
        session_config = get_section(config, "session")
        ledger_config = get_section(config, "ledger")
        self.store = store
        self.ids = id_generator or default_id_generator
        self.starting_balance = Decimal(str(ledger_config.get("starting_balance", DEFAULT_STARTING_BALANCE))).quantize(CENTS)
        self.password_min_length = int(session_config.get("password_min_length", DEFAULT_PASSWORD_MIN_LENGTH))
        self.hash_iterations = int(session_config.get("hash_iterations", 100_000))
        self._current_id: Optional[str] = None

    def register(self, email: str, password: str, name: str, role: Union[Role, str] = Role.CLIENT,
                 vendor_info: Optional[Union[VendorInfo, Dict[str, Any]]] = None) -> Account:
        """
        Create an account with the starting balance and sign it in.

        Raises:
            DuplicateError: Email already registered
            ValidationFailedError: Bad email, empty name, weak password, unknown
                role, or vendor details missing/misplaced
        """
        email = self._normalize_email(email)
        name = (name or "").strip()
        if not name:
            raise ValidationFailedError("Name is required")
        try:
            role = Role(role)
        except ValueError:
            raise ValidationFailedError(f"Unknown account type: {role}")
        self._check_password(password)
        vendor_info = self._vendor_info_for(role, vendor_info)

        with self.store.lock:
            accounts = load_models(self.store, ACCOUNTS, Account)
            if any(a.email == email for a in accounts):
                raise DuplicateError(f"An account with this email already exists: {email}")

            account = Account(
                id=self.ids.next_id(after=(a.id for a in accounts)),
                email=email,
                name=name,
                role=role,
                balance=self.starting_balance,
                suspended=False,
                vendor_info=vendor_info
            )
            credentials = self.store.list(CREDENTIALS)
            credentials.append(self._new_credential(account.id, password))
            self.store.put_many({
                ACCOUNTS: dump_models(accounts + [account]),
                CREDENTIALS: credentials,
            })

        self._current_id = account.id
        account_registrations.labels(role=role.value).inc()
        logger.info("Account registered", account_id=account.id, role=role.value)
        return account

    def authenticate(self, email: str, password: str) -> Account:
        """
        Sign in with email and password.

        Raises:
            AuthenticationError: Unknown email, wrong password, or suspended account
        """
        email = (email or "").strip().lower()
        account = next((a for a in load_models(self.store, ACCOUNTS, Account) if a.email == email), None)
        credential = self._credential(account.id) if account else None

        if account is None or credential is None or not self._matches(password, credential, "passwordHash"):
            authentication_attempts.labels(outcome="failure").inc()
            logger.warning("Sign-in failed", email=email)
            raise AuthenticationError("Invalid email or password")

        if account.suspended:
            authentication_attempts.labels(outcome="failure").inc()
            logger.warning("Sign-in refused for suspended account", account_id=account.id)
            raise AuthenticationError("Account is suspended")

        self._current_id = account.id
        authentication_attempts.labels(outcome="success").inc()
        logger.info("Signed in", account_id=account.id)
        return account

    def logout(self) -> None:
        self._current_id = None

    def current_account(self) -> Optional[Account]:
        """The signed-in account, re-read from the store; suspension ends the session"""
        if self._current_id is None:
            return None

        account = next(
            (a for a in load_models(self.store, ACCOUNTS, Account) if a.id == self._current_id),
            None
        )
        if account is None or account.suspended:
            logger.info("Session ended", account_id=self._current_id)
            self._current_id = None
            return None
        return account

    def current_principal(self) -> Optional[Principal]:
        account = self.current_account()
        if account is None:
            return None
        return Principal(id=account.id, role=account.role)

    def require_principal(self) -> Principal:
        """
        Raises:
            AuthenticationError: Nobody is signed in
        """
        principal = self.current_principal()
        if principal is None:
            raise AuthenticationError("Sign in required")
        return principal

    def change_password(self, account_id: str, current_password: str, new_password: str) -> None:
        """
        Raises:
            AuthenticationError: Current password is wrong
            ValidationFailedError: New password violates the policy
        """
        self._check_password(new_password)
        with self.store.lock:
            credentials = self.store.list(CREDENTIALS)
            i = self._credential_index(credentials, account_id)
            if not self._matches(current_password, credentials[i], "passwordHash"):
                raise AuthenticationError("Current password is incorrect")
            credentials[i]["passwordHash"] = self._hash(new_password, credentials[i]["salt"], credentials[i]["iterations"])
            self.store.put(CREDENTIALS, credentials)
        logger.info("Password changed", account_id=account_id)

    def set_pin(self, account_id: str, pin: str) -> None:
        """
        Raises:
            ValidationFailedError: PIN is not exactly four digits
        """
        if not isinstance(pin, str) or not PIN_PATTERN.match(pin):
            raise ValidationFailedError(f"PIN must be exactly {PIN_LENGTH} digits")
        with self.store.lock:
            credentials = self.store.list(CREDENTIALS)
            i = self._credential_index(credentials, account_id)
            credentials[i]["pinHash"] = self._hash(pin, credentials[i]["salt"], credentials[i]["iterations"])
            self.store.put(CREDENTIALS, credentials)
        logger.info("Transaction PIN set", account_id=account_id)

    def verify_pin(self, account_id: str, pin: str) -> bool:
        credential = self._credential(account_id)
        if credential is None or "pinHash" not in credential:
            return False
        return self._matches(pin, credential, "pinHash")

    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_email(email: Optional[str]) -> str:
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise ValidationFailedError(f"Invalid email address: {email or '(empty)'}")
        return email

    def _check_password(self, password: Optional[str]) -> None:
        if not isinstance(password, str) or len(password) < self.password_min_length:
            raise ValidationFailedError(
                f"Password must be at least {self.password_min_length} characters long"
            )

    @staticmethod
    def _vendor_info_for(role: Role, vendor_info) -> Optional[VendorInfo]:
        if role != Role.VENDOR:
            if vendor_info:
                raise ValidationFailedError("Only vendor accounts carry business details")
            return None

        if vendor_info is None:
            raise ValidationFailedError("Vendor accounts require a business name and category")
        try:
            info = vendor_info if isinstance(vendor_info, VendorInfo) else VendorInfo.model_validate(vendor_info)
        except ValidationError as e:
            raise ValidationFailedError(f"Vendor information required: {e.errors()[0]['loc']}") from e
        # New vendors always start unverified
        return info.model_copy(update={"is_verified": False})

    def _new_credential(self, account_id: str, password: str) -> Dict[str, Any]:
        salt = os.urandom(16).hex()
        return {
            "accountId": account_id,
            "salt": salt,
            "iterations": self.hash_iterations,
            "passwordHash": self._hash(password, salt, self.hash_iterations),
        }

    @staticmethod
    def _hash(secret: str, salt: str, iterations: int) -> str:
        return hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), bytes.fromhex(salt), int(iterations)).hex()

    def _matches(self, secret: Optional[str], credential: Dict[str, Any], field: str) -> bool:
        if not isinstance(secret, str):
            return False
        candidate = self._hash(secret, credential["salt"], credential["iterations"])
        return hmac.compare_digest(candidate, credential[field])

    def _credential(self, account_id: str) -> Optional[Dict[str, Any]]:
        return next((c for c in self.store.list(CREDENTIALS) if c.get("accountId") == account_id), None)

    @staticmethod
    def _credential_index(credentials: List[Dict[str, Any]], account_id: str) -> int:
        for i, credential in enumerate(credentials):
            if credential.get("accountId") == account_id:
                return i
        raise NotFoundError(f"No credentials for account {account_id}")
