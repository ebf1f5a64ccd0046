"""
Points Use Case DTOs (Data Transfer Objects)
"""

from pydantic import BaseModel


class BalanceResponse(BaseModel):
    """Points balance of one user in one workspace"""

    user_id: str
    workspace_id: str
    total_points: int
    available_points: int
