"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Every aggregate carries an integer surrogate key plus a public string id
(a UUID generated by the services); foreign keys and API payloads use the
public ids.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship


class SecurityTokenType(str, Enum):
    RESET = "RESET"
    EMAIL_CONFIRM = "EMAIL_CONFIRM"


class CommunityAdmin(SQLModel, table=True):
    """Link table between communities and the users administering them."""
    community_id: Optional[str] = Field(default=None, foreign_key="community.community_id", primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="user.user_id", primary_key=True)


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `user_id`: public identifier
    - `email`: unique login name
    - `encrypted_password`: hashed password string (never store plaintext)
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, unique=True, nullable=False)
    name: str
    email: str = Field(index=True, unique=True, nullable=False)
    email_confirmed: bool = False
    encrypted_password: str
    communities: List["Community"] = Relationship(back_populates="admins", link_model=CommunityAdmin)
    user_tokens: List["SecurityToken"] = Relationship(
        back_populates="token_owner",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class Community(SQLModel, table=True):
    """A named residential group with admins, houses and amenities."""
    id: Optional[int] = Field(default=None, primary_key=True)
    community_id: str = Field(index=True, unique=True, nullable=False)
    name: str
    district: str
    admins: List[User] = Relationship(back_populates="communities", link_model=CommunityAdmin)
    houses: List["CommunityHouse"] = Relationship(back_populates="community")
    amenities: List["Amenity"] = Relationship(
        back_populates="community",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class CommunityHouse(SQLModel, table=True):
    """A physical residence belonging to a community."""
    id: Optional[int] = Field(default=None, primary_key=True)
    house_id: str = Field(index=True, unique=True, nullable=False)
    name: str
    community_id: Optional[str] = Field(default=None, foreign_key="community.community_id", index=True)
    community: Optional[Community] = Relationship(back_populates="houses")
    house_members: List["HouseMember"] = Relationship(back_populates="community_house")
    amenities: List["Amenity"] = Relationship(back_populates="community_house")


class HouseMemberDocument(SQLModel, table=True):
    """An image document (JPEG bytes) attached to a house member."""
    id: Optional[int] = Field(default=None, primary_key=True)
    document_filename: str = Field(unique=True)
    document_content: bytes = b""


class HouseMember(SQLModel, table=True):
    """A person residing in a `CommunityHouse`.

    A member removed from a house keeps its row with `house_id` cleared.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    member_id: str = Field(index=True, unique=True, nullable=False)
    name: str
    house_id: Optional[str] = Field(default=None, foreign_key="communityhouse.house_id", index=True)
    document_id: Optional[int] = Field(default=None, foreign_key="housememberdocument.id")
    community_house: Optional[CommunityHouse] = Relationship(back_populates="house_members")
    house_member_document: Optional[HouseMemberDocument] = Relationship(
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "single_parent": True},
    )


class Amenity(SQLModel, table=True):
    """A bookable resource tied to a community (and optionally a house)."""
    id: Optional[int] = Field(default=None, primary_key=True)
    amenity_id: str = Field(index=True, unique=True, nullable=False)
    name: str
    description: str
    price: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    community_id: Optional[str] = Field(default=None, foreign_key="community.community_id", index=True)
    house_id: Optional[str] = Field(default=None, foreign_key="communityhouse.house_id")
    community: Optional[Community] = Relationship(back_populates="amenities")
    community_house: Optional[CommunityHouse] = Relationship(back_populates="amenities")
    booking_items: List["AmenityBookingItem"] = Relationship(
        back_populates="amenity",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class AmenityBookingItem(SQLModel, table=True):
    """A booking of an `Amenity` by a user for a time range."""
    id: Optional[int] = Field(default=None, primary_key=True)
    amenity_booking_item_id: str = Field(index=True, unique=True, nullable=False)
    amenity_id: Optional[str] = Field(default=None, foreign_key="amenity.amenity_id", index=True)
    booking_start_date: datetime = Field(sa_type=DateTime(timezone=True))
    booking_end_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    booking_user_id: Optional[str] = Field(default=None, foreign_key="user.user_id")
    amenity: Optional[Amenity] = Relationship(back_populates="booking_items")
    booking_user: Optional[User] = Relationship()


class Payment(SQLModel, table=True):
    """A charge scheduled by a community admin for a house member."""
    id: Optional[int] = Field(default=None, primary_key=True)
    payment_id: str = Field(index=True, unique=True, nullable=False)
    charge: Decimal = Field(max_digits=12, decimal_places=2)
    type: str
    description: str
    recurring: bool = False
    due_date: Optional[date] = None
    admin_id: Optional[str] = Field(default=None, foreign_key="user.user_id", index=True)
    member_id: Optional[str] = Field(default=None, foreign_key="housemember.member_id", index=True)
    admin: Optional[User] = Relationship()
    member: Optional[HouseMember] = Relationship()


class SecurityToken(SQLModel, table=True):
    """A one-time token used for password reset and email confirmation."""
    id: Optional[int] = Field(default=None, primary_key=True)
    token_type: SecurityTokenType
    token: str = Field(unique=True, index=True, nullable=False)
    creation_date: date
    expiry_date: date
    is_used: bool = False
    token_owner_id: Optional[str] = Field(default=None, foreign_key="user.user_id", index=True)
    token_owner: Optional[User] = Relationship(back_populates="user_tokens")
