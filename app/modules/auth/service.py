import logging

from app.config import Settings, settings as default_settings
from app.core.exceptions import DuplicateEmail, InvalidCredential, InvalidPassword, NotFound, StoreError
from app.database.document_store import DocumentStore, SERVER_TIMESTAMP
from app.modules.auth.identity import IdentityNotFound, IdentityProvider
from app.modules.auth.schemas import Identity, LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from app.modules.auth.security import PasswordHasher, TokenCodec
from app.modules.users.models import USERS

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, store: DocumentStore, identity_provider: IdentityProvider, settings: Settings = default_settings):
        self.store = store
        self.identity_provider = identity_provider
        self.hasher = PasswordHasher(settings.bcrypt_rounds)
        self.tokens = TokenCodec.from_settings(settings)

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Create the identity-provider record and mirror the profile document"""
        try:
            self.identity_provider.get_user_by_email(register_data.email)
        except IdentityNotFound:
            pass
        else:
            logger.info(f"Registration rejected, email already in use: {register_data.email}")
            raise DuplicateEmail()

        password_hash = self.hasher.hash(register_data.password)
        record = self.identity_provider.create_user(
            email=register_data.email,
            password_hash=password_hash,
            display_name=register_data.username,
        )
        try:
            self.store.set(USERS, {
                "username": register_data.username,
                "email": register_data.email,
                "password": password_hash,
                "last_login": None,
            }, doc_id=record.id)
        except StoreError:
            # Without a profile the identity can never log in; remove it so the email can be reused
            logger.error(f"Profile write failed for {record.id}, removing identity record")
            self.identity_provider.delete_user(record.id)
            raise

        logger.info(f"Registered user {record.id}")
        return RegisterResponse(message="User registered successfully", user_id=record.id)

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Check the password against the stored hash and issue a session token"""
        try:
            record = self.identity_provider.get_user_by_email(login_data.email)
        except IdentityNotFound:
            raise NotFound("User not found")

        profile = self.store.get(USERS, record.id)
        if profile is None:
            raise NotFound("User not found")

        if not self.hasher.verify(login_data.password, profile.get("password", "")):
            logger.info(f"Login rejected for user {record.id}: wrong password")
            raise InvalidPassword()

        token = self.tokens.sign({
            "uid": record.id,
            "email": profile.get("email"),
            "username": profile.get("username"),
        })
        self.store.update(USERS, record.id, {"last_login": SERVER_TIMESTAMP})

        logger.info(f"User {record.id} logged in")
        return TokenResponse(message="Login successful", token=token)

    def authenticate(self, token: str) -> Identity:
        """Verify a bearer token and return the caller identity"""
        claims = self.tokens.verify(token)
        uid = claims.get("uid")
        if not uid:
            raise InvalidCredential()
        return Identity(uid=uid, email=claims.get("email"), username=claims.get("username"))
