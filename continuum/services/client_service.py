"""Client and pet management, including the client deletion cascade."""

import logging

from redis import Redis

from continuum.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from continuum.core.security import hash_password
from continuum.models.client import Client, ClientCreate, ClientUpdate
from continuum.models.common import new_id, utcnow
from continuum.models.medical_history import OnboardingStatus
from continuum.models.pet import Pet, PetCreate, PetUpdate
from continuum.repositories.appointment_repo import AppointmentRepository
from continuum.repositories.client_repo import ClientRepository
from continuum.repositories.health_record_repo import HealthRecordRepository
from continuum.repositories.onboarding_repo import OnboardingRepository
from continuum.repositories.pet_repo import PetRepository
from continuum.repositories.session_repo import SessionRepository

logger = logging.getLogger(__name__)


class ClientService:
    """Service for client accounts and their pets."""

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        self.clients = ClientRepository(redis)
        self.pets = PetRepository(redis)
        self.appointments = AppointmentRepository(redis)
        self.health_records = HealthRecordRepository(redis)
        self.onboarding = OnboardingRepository(redis)
        self.sessions = SessionRepository(redis)

    # Clients

    async def get_client(self, client_id: str) -> Client:
        """Get a client by ID.

        Args:
            client_id: Client ID

        Returns:
            The client

        Raises:
            NotFoundError: If the client does not exist
        """
        client = await self.clients.get(client_id)
        if client is None:
            raise NotFoundError(resource="Client", resource_id=client_id)
        return client

    async def list_clients(self) -> list[Client]:
        return await self.clients.list_all()

    async def create_client(self, data: ClientCreate) -> Client:
        """Create a client account from the admin side.

        Admin-created accounts are verified from the start.

        Args:
            data: Client details, optionally with a portal password

        Returns:
            The created client

        Raises:
            ValidationError: If the email is taken
        """
        if await self.clients.get_by_email(data.email):
            raise ValidationError("An account with this email already exists")
        client = Client(
            id=new_id("client"),
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            address=data.address,
            notes=data.notes,
            email_verified=True,
        )
        await self.clients.save(client)
        await self.clients.set_verified(client.id)
        if data.password:
            await self.clients.set_password(client.id, hash_password(data.password))
        logger.info("Client created", extra={"client_id": client.id})
        return client

    async def update_client(
        self,
        client_id: str,
        updates: ClientUpdate,
        allow_notes: bool = True,
    ) -> Client:
        """Apply a partial update to a client.

        Args:
            client_id: Client ID
            updates: Fields to change
            allow_notes: False when the client edits their own profile

        Returns:
            The updated client

        Raises:
            NotFoundError: If the client does not exist
        """
        client = await self.get_client(client_id)
        changes = updates.model_dump(exclude_unset=True)
        if not allow_notes:
            changes.pop("notes", None)
        if "address" in changes and updates.address is not None:
            changes["address"] = updates.address
        client = client.model_copy(update={**changes, "updated_at": utcnow()})
        return await self.clients.save(client)

    async def delete_client(self, client_id: str) -> None:
        """Delete a client and everything indexed under it.

        Each step is idempotent, so re-running after a partial failure
        finishes the job. Appointments stay listed for admins and consent
        records are kept; only the client's own index entries go.

        Args:
            client_id: Client ID
        """
        client = await self.clients.get(client_id)

        for pet_id in await self.pets.client_pet_ids(client_id):
            await self._delete_pet_data(client_id, pet_id)
        await self.pets.drop_client_index(client_id)

        await self.appointments.unindex_client(client_id)
        await self.sessions.delete_client_session(client_id)
        await self.onboarding.drop_index(client_id)
        await self.clients.delete(client_id, client.email if client else None)
        logger.info("Client deleted", extra={"client_id": client_id})

    # Pets

    async def get_pet(self, pet_id: str) -> Pet:
        pet = await self.pets.get(pet_id)
        if pet is None:
            raise NotFoundError(resource="Pet", resource_id=pet_id)
        return pet

    async def get_owned_pet(self, client_id: str, pet_id: str) -> Pet:
        """Get a pet, checking it belongs to the client.

        Args:
            client_id: Client ID
            pet_id: Pet ID

        Returns:
            The pet

        Raises:
            NotFoundError: If the pet does not exist
            ForbiddenError: If it belongs to another client
        """
        pet = await self.get_pet(pet_id)
        if pet.client_id != client_id:
            raise ForbiddenError()
        return pet

    async def get_client_pets(self, client_id: str) -> list[Pet]:
        return await self.pets.list_for_client(client_id)

    async def list_pets(self) -> list[Pet]:
        return await self.pets.list_all()

    async def create_pet(self, client_id: str, data: PetCreate) -> Pet:
        """Add a pet to an existing client and start its onboarding.

        Args:
            client_id: Owner's client ID
            data: Pet details

        Returns:
            The created pet

        Raises:
            NotFoundError: If the client does not exist
        """
        await self.get_client(client_id)
        pet = Pet(id=new_id("pet"), client_id=client_id, **data.model_dump())
        await self.pets.save(pet)
        await self.onboarding.save_status(OnboardingStatus(client_id=client_id, pet_id=pet.id))
        logger.info("Pet created", extra={"client_id": client_id, "pet_id": pet.id})
        return pet

    async def update_pet(self, pet_id: str, updates: PetUpdate) -> Pet:
        pet = await self.get_pet(pet_id)
        changes = updates.model_dump(exclude_unset=True)
        if "insurance_details" in changes:
            changes["insurance_details"] = updates.insurance_details
        pet = pet.model_copy(update={**changes, "updated_at": utcnow()})
        return await self.pets.save(pet)

    async def delete_pet(self, pet_id: str) -> None:
        """Delete a pet with its onboarding data and health-record index.

        Args:
            pet_id: Pet ID

        Raises:
            NotFoundError: If the pet does not exist
        """
        pet = await self.get_pet(pet_id)
        await self._delete_pet_data(pet.client_id, pet.id)

    async def _delete_pet_data(self, client_id: str, pet_id: str) -> None:
        await self.pets.delete(pet_id, client_id)
        await self.onboarding.delete_history(pet_id)
        await self.onboarding.delete_status(client_id, pet_id)
        await self.onboarding.delete_draft(client_id, pet_id)
        await self.health_records.drop_pet_index(pet_id)
