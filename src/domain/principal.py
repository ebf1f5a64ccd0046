"""
Principal

The authenticated identity every core operation acts on behalf of.
"""

from uuid import UUID

from pydantic import BaseModel


class Principal(BaseModel):
    """Internal user id plus the identity provider's stable subject id"""

    user_id: UUID
    email: str
    external_auth_id: str
