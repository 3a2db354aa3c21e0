"""Repository for client accounts."""

from continuum.models.client import Client
from continuum.repositories.base import DocumentRepository


class ClientRepository(DocumentRepository):
    """Client documents plus the email, password and verification side keys."""

    INDEX_KEY = "clients:index"

    @staticmethod
    def client_key(client_id: str) -> str:
        return f"client:{client_id}"

    @staticmethod
    def email_key(email: str) -> str:
        return f"clients:email:{email.lower()}"

    @staticmethod
    def password_key(client_id: str) -> str:
        return f"client-password:{client_id}"

    @staticmethod
    def verified_key(client_id: str) -> str:
        return f"client-verified:{client_id}"

    async def get(self, client_id: str) -> Client | None:
        """Get a client by ID.

        Args:
            client_id: The client ID

        Returns:
            The client if found, None otherwise
        """
        return self._load(self.client_key(client_id), Client)

    async def get_by_email(self, email: str) -> Client | None:
        """Get a client by email, case-insensitively.

        Args:
            email: Login email

        Returns:
            The client if found, None otherwise
        """
        client_id = self.redis.get(self.email_key(email))
        if not client_id:
            return None
        return await self.get(client_id)

    async def save(self, client: Client) -> Client:
        """Write the client and keep the email mapping in step with it.

        Args:
            client: The client to store

        Returns:
            The stored client
        """
        previous = await self.get(client.id)
        if previous and previous.email.lower() != client.email.lower():
            self.redis.delete(self.email_key(previous.email))

        self._store(self.client_key(client.id), client)
        self.redis.sadd(self.INDEX_KEY, client.id)
        self.redis.set(self.email_key(client.email), client.id)
        return client

    async def list_all(self) -> list[Client]:
        """List every client, newest first."""
        ids = sorted(self.redis.smembers(self.INDEX_KEY))
        clients = self._load_many((self.client_key(i) for i in ids), Client)
        return sorted(clients, key=lambda c: c.created_at, reverse=True)

    async def set_password(self, client_id: str, password_hash: str) -> None:
        self.redis.set(self.password_key(client_id), password_hash)

    async def get_password(self, client_id: str) -> str | None:
        return self.redis.get(self.password_key(client_id))

    async def set_verified(self, client_id: str) -> None:
        self.redis.set(self.verified_key(client_id), "true")

    async def is_verified(self, client_id: str) -> bool:
        return self.redis.get(self.verified_key(client_id)) == "true"

    async def delete(self, client_id: str, email: str | None = None) -> None:
        """Remove the client document and every key that hangs off it.

        Args:
            client_id: The client ID
            email: Email whose mapping should go too, if it still points here
        """
        if email:
            # Only drop the mapping if it still points at this client.
            if self.redis.get(self.email_key(email)) == client_id:
                self.redis.delete(self.email_key(email))
        self.redis.delete(
            self.password_key(client_id),
            self.verified_key(client_id),
            self.client_key(client_id),
        )
        self.redis.srem(self.INDEX_KEY, client_id)
