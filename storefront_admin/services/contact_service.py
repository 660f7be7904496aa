from typing import List

from sqlalchemy import select

from storefront_admin.models.database import ContactMessage
from storefront_admin.models.schemas import ContactMessageCreate
from storefront_admin.services.base import EntityService


class ContactMessageService(EntityService):
    model = ContactMessage
    label = "Message"

    def list_messages(self) -> List[ContactMessage]:
        stmt = select(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        return list(self.db.scalars(stmt).all())

    def get_message(self, message_id: int) -> ContactMessage:
        return self._get(message_id)

    def create_message(self, message_data: ContactMessageCreate) -> ContactMessage:
        return self._create(ContactMessage(status="unread", **message_data.model_dump()))

    def update_status(self, message_id: int, status: str) -> ContactMessage:
        return self._update(message_id, {"status": status})

    def mark_as_read(self, message_id: int) -> ContactMessage:
        return self.update_status(message_id, "read")

    def mark_as_replied(self, message_id: int) -> ContactMessage:
        return self.update_status(message_id, "replied")

    def delete_message(self, message_id: int) -> None:
        self._delete(message_id)
