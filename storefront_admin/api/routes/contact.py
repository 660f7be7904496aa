from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront_admin.core.database import get_db
from storefront_admin.models.schemas import ContactMessage, ContactMessageCreate, ContactStatusUpdate, Message
from storefront_admin.services.contact_service import ContactMessageService

router = APIRouter()


@router.get("/", response_model=List[ContactMessage])
def get_messages(db: Session = Depends(get_db)):
    return ContactMessageService(db).list_messages()


@router.get("/{message_id}", response_model=ContactMessage)
def get_message(message_id: int, db: Session = Depends(get_db)):
    return ContactMessageService(db).get_message(message_id)


@router.post("/", response_model=ContactMessage, status_code=201)
def create_message(message_data: ContactMessageCreate, db: Session = Depends(get_db)):
    return ContactMessageService(db).create_message(message_data)


@router.patch("/{message_id}/status", response_model=ContactMessage)
def update_message_status(message_id: int, status_data: ContactStatusUpdate, db: Session = Depends(get_db)):
    return ContactMessageService(db).update_status(message_id, status_data.status)


@router.delete("/{message_id}", response_model=Message)
def delete_message(message_id: int, db: Session = Depends(get_db)):
    ContactMessageService(db).delete_message(message_id)
    return {"message": "Contact message deleted"}
