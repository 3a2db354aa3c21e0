"""Admin and client authentication."""

import logging
from dataclasses import dataclass

from redis import Redis

from continuum.core.config import Settings, get_settings
from continuum.core.exceptions import (
    ConflictError,
    EmailNotVerifiedError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from continuum.core.security import (
    create_session_token,
    decode_session_token,
    generate_token,
    hash_password,
    verify_password,
)
from continuum.models.auth import AdminSession, AdminUser, ClientSession
from continuum.models.client import Client, ClientRegistration
from continuum.models.common import new_id, utcnow
from continuum.repositories.client_repo import ClientRepository
from continuum.repositories.pet_repo import PetRepository
from continuum.repositories.session_repo import SessionRepository
from continuum.services.email_client import EmailError
from continuum.services.email_service import EmailService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class LoginResult:
    """A freshly issued session token and who it belongs to."""

    token: str
    max_age: int
    session: AdminSession | ClientSession
    client: Client | None = None


class AuthService:
    """Issues and checks session tokens for both audiences.

    Admin tokens are signed with ``JWT_SECRET`` and client tokens with
    ``CLIENT_JWT_SECRET``. A token is honoured only while its Redis session
    key exists, so logout revokes it server side.
    """

    def __init__(
        self,
        redis: Redis,  # type: ignore[type-arg]
        settings: Settings | None = None,
        email_service: EmailService | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.sessions = SessionRepository(redis)
        self.clients = ClientRepository(redis)
        self.pets = PetRepository(redis)
        self.email_service = email_service

    # Admin

    async def create_admin(self, email: str, password: str, name: str = "Administrator") -> AdminUser:
        """Create the admin account (CLI bootstrap).

        Args:
            email: Admin login email
            password: Plain-text password, hashed before storage
            name: Display name

        Returns:
            The stored admin user

        Raises:
            ConflictError: If an admin with this email exists
        """
        if await self.sessions.get_admin_by_email(email):
            raise ConflictError(f"Admin '{email}' already exists")
        user = AdminUser(
            id=new_id("admin"),
            email=email,
            name=name,
            password_hash=hash_password(password),
        )
        await self.sessions.save_admin(user)
        logger.info("Admin user created", extra={"user_id": user.id})
        return user

    async def login_admin(self, email: str, password: str) -> LoginResult:
        """Check admin credentials and open a session.

        Args:
            email: Admin login email
            password: Plain-text password

        Returns:
            LoginResult with the signed token for the ``admin-token`` cookie

        Raises:
            UnauthorizedError: On unknown email or wrong password
        """
        user = await self.sessions.get_admin_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        session = AdminSession(user_id=user.id, email=user.email)
        ttl = self.settings.admin_session_seconds
        token = create_session_token(
            session.model_dump(by_alias=True, mode="json"),
            self.settings.jwt_secret,
            ttl,
        )
        await self.sessions.create_admin_session(user.id, token, ttl)
        logger.info("Admin logged in", extra={"user_id": user.id})
        return LoginResult(token=token, max_age=ttl, session=session)

    async def get_admin_session(self, token: str | None) -> AdminSession | None:
        """Resolve an admin cookie to its session.

        Args:
            token: Raw ``admin-token`` cookie value

        Returns:
            The session, or None if the token is missing, invalid or logged out
        """
        if not token:
            return None
        claims = decode_session_token(token, self.settings.jwt_secret, "admin")
        if claims is None:
            return None
        session = AdminSession.model_validate(claims)
        if not await self.sessions.has_admin_session(session.user_id):
            return None
        return session

    async def logout_admin(self, token: str | None) -> None:
        session = await self.get_admin_session(token)
        if session is not None:
            await self.sessions.delete_admin_session(session.user_id)

    # Clients

    async def register_client(
        self,
        registration: ClientRegistration,
        locale: str = "en",
    ) -> Client:
        """Create a portal account and send the verification email.

        Args:
            registration: Registration form
            locale: Locale for the verification link

        Returns:
            The new, unverified client

        Raises:
            ValidationError: If the email is already registered
        """
        if await self.clients.get_by_email(registration.email):
            raise ValidationError("An account with this email already exists")

        client = Client(
            id=new_id("client"),
            email=registration.email,
            first_name=registration.first_name,
            last_name=registration.last_name,
            phone=registration.phone,
        )
        await self.clients.save(client)
        await self.clients.set_password(client.id, hash_password(registration.password))
        await self.send_verification(client, locale)
        logger.info("Client registered", extra={"client_id": client.id})
        return client

    async def set_client_password(self, client_id: str, password: str) -> None:
        await self.clients.set_password(client_id, hash_password(password))

    async def send_verification(self, client: Client, locale: str = "en") -> str:
        """Issue a verification token and email it.

        Email failures are logged, not raised.

        Args:
            client: Client to verify
            locale: Locale for the verification link

        Returns:
            The single-use verification token
        """
        token = generate_token()
        await self.sessions.save_verification_token(
            token, client.id, self.settings.verification_token_seconds
        )
        if self.email_service is not None:
            try:
                await self.email_service.send_verification(
                    client.full_name, client.email, token, locale
                )
            except EmailError:
                logger.warning(
                    "Verification email failed", extra={"client_id": client.id}, exc_info=True
                )
        return token

    async def resend_verification(self, client_id: str, locale: str = "en") -> str:
        """Send a fresh verification link.

        Args:
            client_id: Client ID
            locale: Locale for the verification link

        Returns:
            The new verification token

        Raises:
            NotFoundError: If the client does not exist
            ValidationError: If the email is already verified
        """
        client = await self.clients.get(client_id)
        if client is None:
            raise NotFoundError(resource="Client", resource_id=client_id)
        if client.email_verified or await self.clients.is_verified(client_id):
            raise ValidationError("Email is already verified")
        return await self.send_verification(client, locale)

    async def verify_email(self, token: str) -> Client:
        """Mark the token's client as verified and send the welcome email.

        Args:
            token: Verification token from the email link

        Returns:
            The verified client

        Raises:
            ValidationError: If the token is unknown or expired
        """
        client_id = await self.sessions.consume_verification_token(token)
        client = await self.clients.get(client_id) if client_id else None
        if client is None:
            raise ValidationError("Invalid or expired verification token")

        await self.clients.set_verified(client.id)
        client = client.model_copy(update={"email_verified": True, "updated_at": utcnow()})
        await self.clients.save(client)

        if self.email_service is not None:
            try:
                await self.email_service.send_welcome(client.full_name, client.email)
            except EmailError:
                logger.warning("Welcome email failed", extra={"client_id": client.id}, exc_info=True)
        return client

    async def login_client(self, email: str, password: str) -> LoginResult:
        """Check portal credentials, record the login and open a session.

        Args:
            email: Portal login email
            password: Plain-text password

        Returns:
            LoginResult with the signed token for the ``client-token`` cookie

        Raises:
            UnauthorizedError: On unknown email or wrong password
            EmailNotVerifiedError: If the email address was never confirmed
        """
        client = await self.clients.get_by_email(email)
        stored = await self.clients.get_password(client.id) if client else None
        if client is None or not verify_password(password, stored):
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not (client.email_verified or await self.clients.is_verified(client.id)):
            raise EmailNotVerifiedError()

        client = client.model_copy(update={"last_login": utcnow()})
        await self.clients.save(client)

        session = ClientSession(client_id=client.id, email=client.email)
        ttl = self.settings.client_session_seconds
        token = create_session_token(
            session.model_dump(by_alias=True, mode="json"),
            self.settings.client_jwt_secret,
            ttl,
        )
        await self.sessions.create_client_session(client.id, token, ttl)
        logger.info("Client logged in", extra={"client_id": client.id})
        return LoginResult(token=token, max_age=ttl, session=session, client=client)

    async def get_client_session(self, token: str | None) -> ClientSession | None:
        """Resolve a portal cookie to its session.

        Args:
            token: Raw ``client-token`` cookie value

        Returns:
            The session, or None if the token is missing, invalid or logged out
        """
        if not token:
            return None
        claims = decode_session_token(token, self.settings.client_jwt_secret, "client")
        if claims is None:
            return None
        session = ClientSession.model_validate(claims)
        if not await self.sessions.has_client_session(session.client_id):
            return None
        return session

    async def logout_client(self, token: str | None) -> None:
        session = await self.get_client_session(token)
        if session is not None:
            await self.sessions.delete_client_session(session.client_id)

    async def check_pet_ownership(self, client_id: str, pet_id: str) -> None:
        """Check that a pet belongs to the client.

        Args:
            client_id: Client ID from the session
            pet_id: Pet ID from the request

        Raises:
            NotFoundError: If the pet does not exist
            ForbiddenError: If the pet belongs to another client
        """
        pet = await self.pets.get(pet_id)
        if pet is None:
            raise NotFoundError(resource="Pet", resource_id=pet_id)
        if pet.client_id != client_id:
            raise ForbiddenError()
