"""
Authentication service for locally registered users.

Users and the current session live in local storage. There is no server:
logging in checks the stored user records, and a session is just the user
plus the time it was issued.
"""

from typing import Dict, List, Optional, Union

from ..config import ConfigManager, get_config_manager
from ..exceptions import ValidationError
from ..models import ActionType, Outcome, Session, User, UserRole, now_ms
from ..storage import WimsStore
from ..utils import get_audit_logger, get_logger, hash_password, is_valid_email, verify_password

# Built-in demo accounts, accepted when no registered user matches
DEMO_ADMIN = User(
    id="admin-1",
    name="Admin User",
    email="admin@wims.com",
    role=UserRole.ADMIN,
    is_approved=True,
)
DEMO_SALESMAN = User(
    id="salesman-1",
    name="Sales User",
    email="salesman@wims.com",
    role=UserRole.SALESMAN,
    is_approved=True,
)
DEMO_PASSWORDS: Dict[str, str] = {
    DEMO_ADMIN.email: "admin123",
    DEMO_SALESMAN.email: "sales123",
}

ADMIN_PASSWORD_MARKER = "admin"


def default_salesman_email(name: str) -> str:
    """Email given to a salesman who registers without one."""
    return f"{name.strip().lower().replace(' ', '.')}@wims.com"


class AuthService:
    """Service for registration, login and session handling."""

    def __init__(self, store: WimsStore, config: Optional[ConfigManager] = None) -> None:
        """
        Initialize auth service.

        Args:
            store: Loaded application store
            config: Configuration manager (defaults to the global one)
        """
        config = config or get_config_manager()
        self.store = store
        self.logger = get_logger("auth_service")
        self.audit_logger = get_audit_logger(store.storage)
        self.validity_days = config.get("session.validity_days", 7)
        self.remember_days = config.get("session.remember_days", 30)

    # Registration

    def register_user(
        self,
        name: str,
        role: Union[UserRole, str],
        email: str = "",
        phone: str = "",
        password: str = "",
    ) -> User:
        """
        Register a new user and log them in.

        Salesmen are identified by name and start unapproved. Admins are
        identified by email, must use a password containing "admin", and are
        approved immediately.

        Args:
            name: Display name
            role: "admin" or "salesman"
            email: Email address (optional for salesmen)
            phone: Phone number
            password: Password (optional for salesmen)

        Returns:
            The registered User

        Raises:
            ValidationError: If any registration rule fails
        """
        role = UserRole(role)
        name = (name or "").strip()
        email = (email or "").strip()

        if not name:
            raise ValidationError("Name is required")

        if role == UserRole.SALESMAN:
            if self._find_salesman_by_name(name) is not None:
                raise ValidationError(f"A salesman named '{name}' is already registered")
            if email and not is_valid_email(email):
                raise ValidationError("Please enter a valid email address")
            email = email or default_salesman_email(name)
            is_approved = False
        else:
            if not email:
                raise ValidationError("Email is required for admin accounts")
            if not is_valid_email(email):
                raise ValidationError("Please enter a valid email address")
            if self._find_by_email(email, role) is not None:
                raise ValidationError("An admin with this email already exists")
            if ADMIN_PASSWORD_MARKER not in (password or ""):
                raise ValidationError("Unauthorized admin registration")
            is_approved = True

        user = User(
            name=name,
            email=email,
            phone=(phone or "").strip(),
            role=role,
            is_approved=is_approved,
        )
        self.store.users.append(user)
        self.store.save_users()

        if password:
            password_hash, salt = hash_password(password)
            self.store.password_hashes[user.id] = {"hash": password_hash, "salt": salt}
            self.store.save_passwords()

        self.audit_logger.log_action(
            action_type=ActionType.USER_REGISTERED,
            actor=user.name,
            details={"user_id": user.id, "role": role.value},
        )
        self.logger.info(f"Registered {role.value}: {user.name} ({user.id})")

        self._start_session(user)
        return user

    # Login

    def login(self, email: str, password: str, role: Union[UserRole, str]) -> bool:
        """
        Log in with email and password.

        A registered user matching (email, role) is checked against their
        stored password hash; users registered without a password need
        only match. The demo accounts are tried last.

        Returns:
            True if logged in
        """
        role = UserRole(role)
        email = (email or "").strip()

        user = self._find_by_email(email, role)
        if user is not None and self._check_password(user, password):
            self._start_session(user)
            return True

        demo = DEMO_ADMIN if role == UserRole.ADMIN else DEMO_SALESMAN
        if email.lower() == demo.email and DEMO_PASSWORDS[demo.email] == password:
            self._start_session(demo)
            return True

        self._log_failed_login(email or "unknown", role)
        return False

    def login_by_name(self, name: str) -> bool:
        """
        Log a salesman in by name, case-insensitively.

        Returns:
            True if logged in; False for a blank or unknown name
        """
        name = (name or "").strip()
        if not name:
            return False

        user = self._find_salesman_by_name(name)
        if user is None and name.lower() == DEMO_SALESMAN.name.lower():
            user = DEMO_SALESMAN

        if user is None:
            self._log_failed_login(name, UserRole.SALESMAN)
            return False

        self._start_session(user)
        return True

    def auto_login_last_user(self) -> bool:
        """
        Resume the last user without asking for credentials.

        A session younger than the remember period is refreshed if its user
        is still registered. Otherwise, when exactly one user is registered,
        that user is logged in.

        Returns:
            True if a user was logged in
        """
        session = self.store.session
        if session is not None and session.is_valid(self.remember_days):
            user = self.store.find_user(session.user.id)
            if user is not None:
                self._start_session(user)
                return True

        if len(self.store.users) == 1:
            self._start_session(self.store.users[0])
            return True

        return False

    def logout(self) -> None:
        """End the current session."""
        session = self.store.session
        self.store.session = None
        self.store.save_session()

        if session is not None:
            self.audit_logger.log_action(
                action_type=ActionType.USER_LOGOUT,
                actor=session.user.name,
            )
            self.logger.info(f"Logged out {session.user.name}")

    # Session queries

    def get_session(self) -> Optional[Session]:
        return self.store.session

    def current_user(self) -> Optional[User]:
        """
        Get the logged-in user.

        An expired session is destroyed and None is returned.
        """
        session = self.store.session
        if session is None:
            return None

        if not session.is_valid(self.validity_days):
            self.logger.info(f"Session for {session.user.name} expired")
            self.store.session = None
            self.store.save_session()
            return None

        return session.user

    def is_admin(self) -> bool:
        user = self.current_user()
        return user is not None and user.role == UserRole.ADMIN

    def get_users(self, role: Optional[UserRole] = None) -> List[User]:
        if role is None:
            return list(self.store.users)
        return [u for u in self.store.users if u.role == role]

    def registered_salesman_names(self) -> List[str]:
        """Names of registered salesmen, for admin screens only."""
        return [u.name for u in self.store.users if u.role == UserRole.SALESMAN]

    # Helpers

    def _find_by_email(self, email: str, role: UserRole) -> Optional[User]:
        wanted = email.lower()
        return next(
            (u for u in self.store.users if u.role == role and u.email.lower() == wanted),
            None,
        )

    def _find_salesman_by_name(self, name: str) -> Optional[User]:
        wanted = name.strip().lower()
        return next(
            (u for u in self.store.users
             if u.role == UserRole.SALESMAN and u.name.strip().lower() == wanted),
            None,
        )

    def _check_password(self, user: User, password: str) -> bool:
        stored = self.store.password_hashes.get(user.id)
        if not stored:
            return True
        return verify_password(password or "", stored["hash"], stored["salt"])

    def _start_session(self, user: User) -> Session:
        session = Session(user=user, timestamp=now_ms())
        self.store.session = session
        self.store.save_session()

        self.audit_logger.log_action(
            action_type=ActionType.USER_LOGIN,
            actor=user.name,
            details={"user_id": user.id, "role": user.role.value},
        )
        self.logger.info(f"Logged in {user.role.value} {user.name}")
        return session

    def _log_failed_login(self, identifier: str, role: UserRole) -> None:
        self.audit_logger.log_action(
            action_type=ActionType.USER_LOGIN,
            actor=identifier,
            details={"role": role.value},
            outcome=Outcome.FAILURE,
            error_message="Invalid credentials",
        )
        self.logger.warning(f"Failed {role.value} login for {identifier}")
