"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
communities, houses, members, documents, amenities, bookings, payments,
security tokens). Repositories return SQLModel objects and perform
commits/refreshes where appropriate.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from . import models


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page number and page size for list queries."""
    page: int = 0
    size: int = 200

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class PageInfo:
    current_page: int
    page_limit: int
    total_pages: int
    total_elements: int

    @classmethod
    def of(cls, pageable: PageRequest, total_elements: int) -> "PageInfo":
        total_pages = math.ceil(total_elements / pageable.size) if pageable.size else 0
        return cls(pageable.page, pageable.size, total_pages, total_elements)


def _paged(stmt, pageable: Optional[PageRequest]):
    if pageable is None:
        return stmt
    return stmt.offset(pageable.offset).limit(pageable.size)


class _Repository:
    def __init__(self, session: Session):
        self.session = session

    def save(self, obj):
        """Persist `obj` and return the refreshed instance."""
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def save_all(self, objs: list) -> list:
        """Persist every object in `objs` in a single commit."""
        for obj in objs:
            self.session.add(obj)
        self.session.commit()
        for obj in objs:
            self.session.refresh(obj)
        return objs

    def delete(self, obj) -> None:
        self.session.delete(obj)
        self.session.commit()


class UserRepository(_Repository):
    """CRUD operations for `User` objects."""

    def get_by_user_id(self, user_id: str) -> Optional[models.User]:
        """Return a `User` by public id or `None` if not found."""
        stmt = select(models.User).where(models.User.user_id == user_id)
        return self.session.exec(stmt).first()

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def list(self, pageable: Optional[PageRequest] = None) -> List[models.User]:
        stmt = select(models.User).order_by(models.User.id)
        return self.session.exec(_paged(stmt, pageable)).all()

    def list_admins_of_community(self, community_id: str, pageable: Optional[PageRequest] = None) -> List[models.User]:
        """Return the admins of `community_id` ordered by insertion."""
        stmt = (
            select(models.User)
            .join(models.CommunityAdmin, models.CommunityAdmin.user_id == models.User.user_id)
            .where(models.CommunityAdmin.community_id == community_id)
            .order_by(models.User.id)
        )
        return self.session.exec(_paged(stmt, pageable)).all()


class CommunityRepository(_Repository):
    """CRUD operations for `Community` objects."""

    def get_by_community_id(self, community_id: str) -> Optional[models.Community]:
        stmt = select(models.Community).where(models.Community.community_id == community_id)
        return self.session.exec(stmt).first()

    def exists(self, community_id: str) -> bool:
        stmt = select(models.Community.id).where(models.Community.community_id == community_id)
        return self.session.exec(stmt).first() is not None

    def list(self, pageable: Optional[PageRequest] = None) -> List[models.Community]:
        stmt = select(models.Community).order_by(models.Community.id)
        return self.session.exec(_paged(stmt, pageable)).all()


class CommunityHouseRepository(_Repository):
    """CRUD operations for `CommunityHouse` objects."""

    def get_by_house_id(self, house_id: str) -> Optional[models.CommunityHouse]:
        stmt = select(models.CommunityHouse).where(models.CommunityHouse.house_id == house_id)
        return self.session.exec(stmt).first()

    def list(self, pageable: Optional[PageRequest] = None) -> List[models.CommunityHouse]:
        stmt = select(models.CommunityHouse).order_by(models.CommunityHouse.id)
        return self.session.exec(_paged(stmt, pageable)).all()

    def list_by_community(self, community_id: str, pageable: Optional[PageRequest] = None) -> List[models.CommunityHouse]:
        stmt = (
            select(models.CommunityHouse)
            .where(models.CommunityHouse.community_id == community_id)
            .order_by(models.CommunityHouse.id)
        )
        return self.session.exec(_paged(stmt, pageable)).all()


class HouseMemberRepository(_Repository):
    """Query helpers for `HouseMember` records."""

    def get_by_member_id(self, member_id: str) -> Optional[models.HouseMember]:
        stmt = select(models.HouseMember).where(models.HouseMember.member_id == member_id)
        return self.session.exec(stmt).first()

    def list_by_house(self, house_id: str, pageable: Optional[PageRequest] = None) -> List[models.HouseMember]:
        stmt = (
            select(models.HouseMember)
            .where(models.HouseMember.house_id == house_id)
            .order_by(models.HouseMember.id)
        )
        return self.session.exec(_paged(stmt, pageable)).all()

    def list_for_houses_administered_by(self, user_id: str, pageable: Optional[PageRequest] = None) -> List[models.HouseMember]:
        """Return members of every house in the communities `user_id` administers."""
        stmt = (
            select(models.HouseMember)
            .join(models.CommunityHouse, models.CommunityHouse.house_id == models.HouseMember.house_id)
            .join(models.CommunityAdmin, models.CommunityAdmin.community_id == models.CommunityHouse.community_id)
            .where(models.CommunityAdmin.user_id == user_id)
            .order_by(models.HouseMember.id)
        )
        return self.session.exec(_paged(stmt, pageable)).all()


class HouseMemberDocumentRepository(_Repository):
    """Persistence for `HouseMemberDocument` blobs."""

    def get_by_filename(self, filename: str) -> Optional[models.HouseMemberDocument]:
        stmt = select(models.HouseMemberDocument).where(models.HouseMemberDocument.document_filename == filename)
        return self.session.exec(stmt).first()


class AmenityRepository(_Repository):
    """CRUD operations for `Amenity` objects."""

    def get_by_amenity_id(self, amenity_id: str) -> Optional[models.Amenity]:
        stmt = select(models.Amenity).where(models.Amenity.amenity_id == amenity_id)
        return self.session.exec(stmt).first()

    def list_by_community(self, community_id: str) -> List[models.Amenity]:
        stmt = select(models.Amenity).where(models.Amenity.community_id == community_id).order_by(models.Amenity.id)
        return self.session.exec(stmt).all()


class AmenityBookingItemRepository(_Repository):
    """Query helpers for `AmenityBookingItem` records."""

    def get_by_booking_id(self, booking_id: str) -> Optional[models.AmenityBookingItem]:
        stmt = select(models.AmenityBookingItem).where(
            models.AmenityBookingItem.amenity_booking_item_id == booking_id
        )
        return self.session.exec(stmt).first()


class PaymentRepository(_Repository):
    """CRUD operations for `Payment` objects."""

    def get_by_payment_id(self, payment_id: str) -> Optional[models.Payment]:
        stmt = select(models.Payment).where(models.Payment.payment_id == payment_id)
        return self.session.exec(stmt).first()

    def list_by_member(self, member_id: str) -> List[models.Payment]:
        stmt = select(models.Payment).where(models.Payment.member_id == member_id).order_by(models.Payment.id)
        return self.session.exec(stmt).all()

    def page_by_admin(self, admin_id: str, pageable: PageRequest) -> Tuple[List[models.Payment], int]:
        """Return one page of payments scheduled by `admin_id` and the total count."""
        total = self.session.exec(
            select(func.count()).select_from(models.Payment).where(models.Payment.admin_id == admin_id)
        ).one()
        stmt = select(models.Payment).where(models.Payment.admin_id == admin_id).order_by(models.Payment.id)
        return self.session.exec(_paged(stmt, pageable)).all(), total


class SecurityTokenRepository(_Repository):
    """Persistence for `SecurityToken` records."""

    def list_for_owner(self, user_id: str, token_type: Optional[models.SecurityTokenType] = None) -> List[models.SecurityToken]:
        stmt = select(models.SecurityToken).where(models.SecurityToken.token_owner_id == user_id)
        if token_type is not None:
            stmt = stmt.where(models.SecurityToken.token_type == token_type)
        return self.session.exec(stmt).all()
