"""Repository for admin users, login sessions and email verification tokens."""

from continuum.models.auth import AdminUser
from continuum.repositories.base import DocumentRepository


class SessionRepository(DocumentRepository):
    """Server-side session markers.

    A signed token is only honoured while its session key exists, so deleting
    the key revokes the token.
    """

    @staticmethod
    def admin_key(user_id: str) -> str:
        return f"admin:{user_id}"

    @staticmethod
    def admin_email_key(email: str) -> str:
        return f"admins:email:{email.lower()}"

    @staticmethod
    def admin_session_key(user_id: str) -> str:
        return f"session:{user_id}"

    @staticmethod
    def client_session_key(client_id: str) -> str:
        return f"session:client:{client_id}"

    @staticmethod
    def verification_key(token: str) -> str:
        return f"verify-token:{token}"

    # Admin users

    async def get_admin(self, user_id: str) -> AdminUser | None:
        return self._load(self.admin_key(user_id), AdminUser)

    async def get_admin_by_email(self, email: str) -> AdminUser | None:
        """Get an admin user by email.

        Args:
            email: Admin login email

        Returns:
            The admin user if found, None otherwise
        """
        user_id = self.redis.get(self.admin_email_key(email))
        if not user_id:
            return None
        return await self.get_admin(user_id)

    async def save_admin(self, user: AdminUser) -> AdminUser:
        """Store an admin user and its email lookup.

        Args:
            user: The admin user

        Returns:
            The stored user
        """
        self._store(self.admin_key(user.id), user)
        self.redis.set(self.admin_email_key(user.email), user.id)
        return user

    # Sessions

    async def create_admin_session(self, user_id: str, token: str, ttl_seconds: int) -> None:
        """Record an admin session.

        Args:
            user_id: Admin user ID
            token: The issued token
            ttl_seconds: Session lifetime
        """
        self.redis.setex(self.admin_session_key(user_id), ttl_seconds, token)

    async def has_admin_session(self, user_id: str) -> bool:
        return bool(self.redis.exists(self.admin_session_key(user_id)))

    async def delete_admin_session(self, user_id: str) -> None:
        self.redis.delete(self.admin_session_key(user_id))

    async def create_client_session(self, client_id: str, token: str, ttl_seconds: int) -> None:
        """Record a portal session.

        Args:
            client_id: Client ID
            token: The issued token
            ttl_seconds: Session lifetime
        """
        self.redis.setex(self.client_session_key(client_id), ttl_seconds, token)

    async def has_client_session(self, client_id: str) -> bool:
        return bool(self.redis.exists(self.client_session_key(client_id)))

    async def delete_client_session(self, client_id: str) -> None:
        self.redis.delete(self.client_session_key(client_id))

    # Email verification

    async def save_verification_token(self, token: str, client_id: str, ttl_seconds: int) -> None:
        """Store a verification token.

        Args:
            token: Random token sent by email
            client_id: Client the token verifies
            ttl_seconds: Token lifetime
        """
        self.redis.setex(self.verification_key(token), ttl_seconds, client_id)

    async def consume_verification_token(self, token: str) -> str | None:
        """Return the client id for a token and invalidate it.

        Args:
            token: Token from the verification link

        Returns:
            The client ID, or None if the token is unknown or expired
        """
        key = self.verification_key(token)
        client_id = self.redis.get(key)
        if client_id:
            self.redis.delete(key)
        return client_id
