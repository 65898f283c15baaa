import logging
from typing import Optional

from src.db import Store
from src.errors import NotFound, ValidationError
from src.schemas import ContactFields

logger = logging.getLogger(__name__)

# SQLite INTEGER is a signed 64-bit value.
MAX_CONTACT_ID = 2 ** 63 - 1

SELECT_ALL = "SELECT * FROM contacts ORDER BY lastname, firstname"
SELECT_ONE = "SELECT * FROM contacts WHERE id = :id"
INSERT = """
    INSERT INTO contacts
        (firstname, lastname, email, homephone, mobile, address, birthday, created_at, updated_at)
    VALUES
        (:firstname, :lastname, :email, :homephone, :mobile, :address, :birthday,
         CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
"""
UPDATE = """
    UPDATE contacts
    SET firstname = :firstname, lastname = :lastname, email = :email,
        homephone = :homephone, mobile = :mobile, address = :address,
        birthday = :birthday, updated_at = CURRENT_TIMESTAMP
    WHERE id = :id
"""
DELETE = "DELETE FROM contacts WHERE id = :id"


def _validate(fields: ContactFields) -> dict:
    if fields.missing_required():
        raise ValidationError()
    return fields.to_params()


def _row_id(contact_id) -> Optional[int]:
    # Anything that cannot be a stored id (text, negatives, >64 bit) has no row.
    if isinstance(contact_id, str):
        if not (contact_id.isascii() and contact_id.isdigit()):
            return None
        contact_id = int(contact_id)
    if not isinstance(contact_id, int) or not 0 < contact_id <= MAX_CONTACT_ID:
        return None
    return contact_id


class ContactService:
    """
    The five contact operations.

    Update and delete run as one conditional statement each; a write that
    touches no row means the id does not exist.
    """

    def __init__(self, store: Store):
        self.store = store

    async def list(self):
        return await self.store.query_all(SELECT_ALL)

    async def get(self, contact_id):
        row_id = _row_id(contact_id)
        if row_id is None:
            raise NotFound()
        row = await self.store.query_one(SELECT_ONE, {"id": row_id})
        if row is None:
            raise NotFound()
        return row

    async def create(self, fields: ContactFields):
        params = _validate(fields)
        result = await self.store.execute(INSERT, params)
        logger.info("contact_created id=%s", result.last_insert_id)
        return await self.get(result.last_insert_id)

    async def update(self, contact_id, fields: ContactFields):
        params = _validate(fields)
        row_id = _row_id(contact_id)
        if row_id is None:
            raise NotFound()
        result = await self.store.execute(UPDATE, {**params, "id": row_id})
        if result.rows_affected == 0:
            raise NotFound()
        logger.info("contact_updated id=%s", row_id)
        return await self.get(row_id)

    async def delete(self, contact_id):
        row_id = _row_id(contact_id)
        if row_id is None:
            raise NotFound()
        result = await self.store.execute(DELETE, {"id": row_id})
        if result.rows_affected == 0:
            raise NotFound()
        logger.info("contact_deleted id=%s", row_id)
