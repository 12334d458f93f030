"""Request bodies for account and directory endpoints."""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional

from pydantic import EmailStr, Field

from hive.domain.base import CamelModel, CleanStr

Name = Annotated[CleanStr, Field(min_length=1, max_length=50)]
Password = Annotated[str, Field(min_length=6, max_length=128)]


class RegisterRequest(CamelModel):
	email: EmailStr
	password: Password
	first_name: Name
	last_name: Name


class LoginRequest(CamelModel):
	email: EmailStr
	password: str


class ProfileUpdateRequest(CamelModel):
	first_name: Optional[Name] = None
	last_name: Optional[Name] = None
	bio: Optional[Annotated[CleanStr, Field(max_length=500)]] = None
	goals: Optional[List[CleanStr]] = None
	interests: Optional[List[CleanStr]] = None
	expertise: Optional[List[CleanStr]] = None
	is_mentor: Optional[bool] = None
	is_seeking_mentor: Optional[bool] = None
	mentor_interests: Optional[List[CleanStr]] = None


class AvatarUpdateRequest(CamelModel):
	avatar: Annotated[CleanStr, Field(max_length=500)]


class ChangePasswordRequest(CamelModel):
	current_password: str
	new_password: Password


class ForgotPasswordRequest(CamelModel):
	email: EmailStr


class ResetPasswordRequest(CamelModel):
	new_password: Password


class RefreshRequest(CamelModel):
	# Falls back to the bearer header when omitted.
	refresh_token: Optional[str] = None


class RevocationRemoveRequest(CamelModel):
	token: Annotated[str, Field(min_length=1)]


ReputationAction = Literal["upvote", "downvote", "milestone", "helpful"]


class ReputationRequest(CamelModel):
	action: ReputationAction
