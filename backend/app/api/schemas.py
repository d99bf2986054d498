from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserResponse(CamelModel):
    """Public profile fields - never includes the password hash"""
    user_id: int
    username: str
    display_name: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None


class TokenUser(CamelModel):
    user_id: int
    username: str


class AuthResponse(CamelModel):
    token: str
    user: TokenUser


class PostResponse(CamelModel):
    post_id: int
    user_id: int
    username: str
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    text_content: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None
