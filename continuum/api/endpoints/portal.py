"""Client portal: own profile, pets, appointments and health records."""

from fastapi import APIRouter, Response

from continuum.api.dependencies import AppointmentSvc, ClientAuth, ClientSvc, HealthRecordSvc
from continuum.models.appointment import Appointment
from continuum.models.client import Client, ClientUpdate
from continuum.models.health_record import HealthRecord
from continuum.models.pet import Pet, PetCreate, PetUpdate

router = APIRouter()


@router.get("/profile", response_model=Client, response_model_exclude={"notes"})
async def get_profile(session: ClientAuth, clients: ClientSvc) -> Client:
    """The signed-in client's profile."""
    return await clients.get_client(session.client_id)


@router.put("/profile", response_model=Client, response_model_exclude={"notes"})
async def update_profile(body: ClientUpdate, session: ClientAuth, clients: ClientSvc) -> Client:
    """Clients may edit their contact details; clinic notes are admin-only."""
    return await clients.update_client(session.client_id, body, allow_notes=False)


@router.get("/pets", response_model=list[Pet])
async def list_pets(session: ClientAuth, clients: ClientSvc) -> list[Pet]:
    return await clients.get_client_pets(session.client_id)


@router.post("/pets", response_model=Pet, status_code=201)
async def create_pet(body: PetCreate, session: ClientAuth, clients: ClientSvc) -> Pet:
    """Add a pet to the signed-in client's account."""
    return await clients.create_pet(session.client_id, body)


@router.get("/pets/{pet_id}", response_model=Pet)
async def get_pet(pet_id: str, session: ClientAuth, clients: ClientSvc) -> Pet:
    """Get one of the client's pets; other clients' pets are reported as not found."""
    return await clients.get_owned_pet(session.client_id, pet_id)


@router.put("/pets/{pet_id}", response_model=Pet)
async def update_pet(
    pet_id: str,
    body: PetUpdate,
    session: ClientAuth,
    clients: ClientSvc,
) -> Pet:
    await clients.get_owned_pet(session.client_id, pet_id)
    return await clients.update_pet(pet_id, body)


@router.delete("/pets/{pet_id}", status_code=204)
async def delete_pet(pet_id: str, session: ClientAuth, clients: ClientSvc) -> Response:
    """Delete one of the client's pets."""
    await clients.get_owned_pet(session.client_id, pet_id)
    await clients.delete_pet(pet_id)
    return Response(status_code=204)


@router.get("/appointments", response_model=list[Appointment])
async def list_appointments(session: ClientAuth, service: AppointmentSvc) -> list[Appointment]:
    """The client's appointments, latest first."""
    return await service.list_for_client(session.client_id)


@router.get("/pets/{pet_id}/health-records", response_model=list[HealthRecord])
async def list_health_records(
    pet_id: str,
    session: ClientAuth,
    clients: ClientSvc,
    records: HealthRecordSvc,
) -> list[HealthRecord]:
    await clients.get_owned_pet(session.client_id, pet_id)
    return await records.list_for_pet(pet_id)
