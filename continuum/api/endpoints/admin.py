"""Admin back-office: clients, pets, appointments and health records."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response

from continuum.api.dependencies import (
    AdminAuth,
    AppointmentSvc,
    ClientSvc,
    EmailSvc,
    HealthRecordSvc,
    get_admin_session,
)
from continuum.models.appointment import Appointment, AppointmentCreate, AppointmentUpdate
from continuum.models.client import Client, ClientCreate, ClientUpdate
from continuum.models.health_record import HealthRecord, HealthRecordCreate
from continuum.models.pet import Pet, PetUpdate

router = APIRouter(dependencies=[Depends(get_admin_session)])


# Clients


@router.get("/clients", response_model=list[Client])
async def list_clients(clients: ClientSvc) -> list[Client]:
    """List every client, newest first."""
    return await clients.list_clients()


@router.post("/clients", response_model=Client, status_code=201)
async def create_client(body: ClientCreate, clients: ClientSvc) -> Client:
    return await clients.create_client(body)


@router.get("/clients/{client_id}")
async def get_client(client_id: str, clients: ClientSvc) -> dict[str, Any]:
    """A client together with their pets."""
    client = await clients.get_client(client_id)
    pets = await clients.get_client_pets(client_id)
    return {
        "client": client.model_dump(by_alias=True, mode="json", exclude_none=True),
        "pets": [p.model_dump(by_alias=True, mode="json", exclude_none=True) for p in pets],
    }


@router.put("/clients/{client_id}", response_model=Client)
async def update_client(client_id: str, body: ClientUpdate, clients: ClientSvc) -> Client:
    return await clients.update_client(client_id, body)


@router.delete("/clients/{client_id}", status_code=204)
async def delete_client(client_id: str, clients: ClientSvc) -> Response:
    """Delete the client, their pets and every index entry pointing at them."""
    await clients.get_client(client_id)
    await clients.delete_client(client_id)
    return Response(status_code=204)


# Pets


@router.get("/pets", response_model=list[Pet])
async def list_pets(clients: ClientSvc) -> list[Pet]:
    return await clients.list_pets()


@router.get("/pets/{pet_id}", response_model=Pet)
async def get_pet(pet_id: str, clients: ClientSvc) -> Pet:
    return await clients.get_pet(pet_id)


@router.put("/pets/{pet_id}", response_model=Pet)
async def update_pet(pet_id: str, body: PetUpdate, clients: ClientSvc) -> Pet:
    return await clients.update_pet(pet_id, body)


@router.delete("/pets/{pet_id}", status_code=204)
async def delete_pet(pet_id: str, clients: ClientSvc) -> Response:
    """Delete a pet and drop it from its owner's pet list."""
    await clients.delete_pet(pet_id)
    return Response(status_code=204)


# Appointments


@router.get("/appointments", response_model=list[Appointment])
async def list_appointments(
    service: AppointmentSvc,
    limit: Annotated[int, Query(ge=1, le=500)] = 20,
) -> list[Appointment]:
    """Most recent appointments by date."""
    return await service.list_recent(limit)


@router.post("/appointments", response_model=Appointment, status_code=201)
async def create_appointment(body: AppointmentCreate, service: AppointmentSvc) -> Appointment:
    """Book an appointment."""
    return await service.create(body)


@router.get("/appointments/{appointment_id}", response_model=Appointment)
async def get_appointment(appointment_id: str, service: AppointmentSvc) -> Appointment:
    return await service.get(appointment_id)


@router.put("/appointments/{appointment_id}", response_model=Appointment)
async def update_appointment(
    appointment_id: str,
    body: AppointmentUpdate,
    service: AppointmentSvc,
) -> Appointment:
    """Apply a partial update to an appointment."""
    return await service.update(appointment_id, body)


@router.delete("/appointments/{appointment_id}", status_code=204)
async def delete_appointment(appointment_id: str, service: AppointmentSvc) -> Response:
    await service.delete(appointment_id)
    return Response(status_code=204)


# Health records


@router.post("/health-records", response_model=HealthRecord, status_code=201)
async def create_health_record(
    body: HealthRecordCreate,
    session: AdminAuth,
    service: HealthRecordSvc,
    email: EmailSvc,
) -> HealthRecord:
    """Store a record; the owner is notified by email when possible."""
    return await service.create_record(body, created_by=session.user_id, email_service=email)


@router.get("/health-records", response_model=list[HealthRecord])
async def list_health_records(
    service: HealthRecordSvc,
    pet_id: Annotated[str | None, Query(alias="petId")] = None,
) -> list[HealthRecord]:
    """List health records, optionally for a single pet."""
    if pet_id:
        return await service.list_for_pet(pet_id)
    return await service.list_all()


@router.get("/health-records/{record_id}", response_model=HealthRecord)
async def get_health_record(record_id: str, service: HealthRecordSvc) -> HealthRecord:
    return await service.get_record(record_id)


@router.delete("/health-records/{record_id}", status_code=204)
async def delete_health_record(record_id: str, service: HealthRecordSvc) -> Response:
    await service.delete_record(record_id)
    return Response(status_code=204)
