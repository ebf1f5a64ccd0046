"""
Invite Use Cases

Issuing, previewing and redeeming workspace invite codes.
"""

from .create_invite_code_use_case import CreateInviteCodeUseCase
from .dtos import InviteCodeResponse, InviteDetailsResponse, RedeemInviteResponse
from .get_invite_details_use_case import GetInviteDetailsUseCase
from .redeem_invite_code_use_case import RedeemInviteCodeUseCase

__all__ = [
    "CreateInviteCodeUseCase",
    "GetInviteDetailsUseCase",
    "RedeemInviteCodeUseCase",
    "InviteCodeResponse",
    "InviteDetailsResponse",
    "RedeemInviteResponse",
]
