from typing import List

from fastapi import APIRouter, Depends, Request, status

from src.db import Store
from src.schemas import ContactFields, ContactResponse, DeleteResponse
from src.services.contacts import ContactService

router = APIRouter()


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_contact_service(store: Store = Depends(get_store)) -> ContactService:
    return ContactService(store)


@router.get("", response_model=List[ContactResponse])
@router.get("/", response_model=List[ContactResponse], include_in_schema=False)
async def list_contacts(service: ContactService = Depends(get_contact_service)):
    return await service.list()


@router.get("/{contact_id}", response_model=ContactResponse)
async def read_contact(contact_id: str, service: ContactService = Depends(get_contact_service)):
    return await service.get(contact_id)


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
@router.post(
    "/",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_contact(
        contact: ContactFields,
        service: ContactService = Depends(get_contact_service),
):
    return await service.create(contact)


@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
        contact_id: str,
        contact: ContactFields,
        service: ContactService = Depends(get_contact_service),
):
    return await service.update(contact_id, contact)


@router.delete("/{contact_id}", response_model=DeleteResponse)
async def delete_contact(contact_id: str, service: ContactService = Depends(get_contact_service)):
    await service.delete(contact_id)
    return DeleteResponse()
