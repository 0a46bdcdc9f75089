"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories,
the mail service and auxiliary logic. Services are intentionally thin:
they perform validation, generate public ids and persist aggregates via
repositories. Lookups that find nothing return `None`/`False` and the
routes translate that into 404/400 responses.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from passlib.context import CryptContext
from sqlmodel import Session

from . import models, repositories
from .auth import AppJwt, get_jwt_codec
from .config import settings
from .errors import CredentialsIncorrectError, UserNotFoundError
from .mail import get_mail_service
from .repositories import PageRequest
from .utils.images import encode_document_image

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

logger = logging.getLogger("myhome.services")


def generate_unique_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class AuthenticationData:
    jwt_token: str
    user_id: str


class AuthService:
    """Authenticate users by email/password and issue JWTs."""
    def __init__(self, session: Session, token_expiration: Optional[timedelta] = None, token_secret: Optional[str] = None):
        self.session = session
        self.user_repo = repositories.UserRepository(session)
        self.token_expiration = token_expiration or timedelta(seconds=settings.TOKEN_EXPIRATION_SECONDS)
        self.token_secret = token_secret or settings.JWT_SECRET
        self.jwt_codec = get_jwt_codec()

    def login(self, email: str, password: str) -> AuthenticationData:
        """Verify credentials and return a signed token with the user id.

        Raises `UserNotFoundError` for an unknown email and
        `CredentialsIncorrectError` for a wrong password.
        """
        logger.debug("Received login request")
        user = self.user_repo.get_by_email(email)
        if not user:
            raise UserNotFoundError(email)
        if not PWD_CTX.verify(password, user.encrypted_password):
            raise CredentialsIncorrectError(user.user_id)
        app_jwt = AppJwt(user_id=user.user_id, expiration=datetime.now(timezone.utc) + self.token_expiration)
        token = self.jwt_codec.encode(app_jwt, self.token_secret)
        return AuthenticationData(jwt_token=token, user_id=user.user_id)


class SecurityTokenService:
    """Create and consume one-time password-reset/email-confirm tokens."""
    def __init__(self, session: Session, reset_days: Optional[int] = None, email_confirm_days: Optional[int] = None):
        self.token_repo = repositories.SecurityTokenRepository(session)
        self.reset_days = settings.TOKENS_RESET_EXPIRATION_DAYS if reset_days is None else reset_days
        self.email_confirm_days = settings.TOKENS_EMAIL_EXPIRATION_DAYS if email_confirm_days is None else email_confirm_days

    def _create(self, token_type: models.SecurityTokenType, live_days: int, owner: models.User) -> models.SecurityToken:
        today = date.today()
        token = models.SecurityToken(
            token_type=token_type,
            token=generate_unique_id(),
            creation_date=today,
            expiry_date=today + timedelta(days=live_days),
            is_used=False,
            token_owner_id=owner.user_id,
        )
        return self.token_repo.save(token)

    def create_email_confirm_token(self, owner: models.User) -> models.SecurityToken:
        return self._create(models.SecurityTokenType.EMAIL_CONFIRM, self.email_confirm_days, owner)

    def create_password_reset_token(self, owner: models.User) -> models.SecurityToken:
        return self._create(models.SecurityTokenType.RESET, self.reset_days, owner)

    def use_token(self, token: models.SecurityToken) -> models.SecurityToken:
        token.is_used = True
        return self.token_repo.save(token)


def find_valid_user_token(token: Optional[str], user: models.User, token_type: models.SecurityTokenType) -> Optional[models.SecurityToken]:
    """Return the unused, unexpired token of `token_type` equal to `token`."""
    today = date.today()
    for tok in user.user_tokens:
        if not tok.is_used and tok.token_type == token_type and tok.token == token and tok.expiry_date > today:
            return tok
    return None


class UserService:
    """Registration, lookups and the password/email-confirmation flows."""
    def __init__(self, session: Session, mail_service=None, token_service: Optional[SecurityTokenService] = None):
        self.session = session
        self.user_repo = repositories.UserRepository(session)
        self.token_repo = repositories.SecurityTokenRepository(session)
        self.token_service = token_service or SecurityTokenService(session)
        self.mail_service = mail_service or get_mail_service()

    def create_user(self, name: str, email: str, password: str) -> Optional[models.User]:
        """Create a user with a hashed password and send the confirmation mail.

        Returns `None` when the email is already registered.
        """
        if self.user_repo.get_by_email(email) is not None:
            return None
        user = models.User(
            user_id=generate_unique_id(),
            name=name,
            email=email,
            encrypted_password=PWD_CTX.hash(password),
        )
        logger.debug("saving user with id[%s] to repository", user.user_id)
        user = self.user_repo.save(user)
        email_confirm_token = self.token_service.create_email_confirm_token(user)
        self.mail_service.send_account_created(user, email_confirm_token)
        return user

    def list_all(self, pageable: Optional[PageRequest] = None) -> List[models.User]:
        return self.user_repo.list(pageable or PageRequest(0, 200))

    def get_user_details(self, user_id: str) -> Optional[models.User]:
        return self.user_repo.get_by_user_id(user_id)

    def find_user_by_email(self, email: str) -> Optional[models.User]:
        return self.user_repo.get_by_email(email)

    def request_reset_password(self, email: Optional[str]) -> bool:
        """Create a RESET token for the user owning `email` and mail the code."""
        if not email:
            return False
        user = self.user_repo.get_by_email(email)
        if not user:
            return False
        reset_token = self.token_service.create_password_reset_token(user)
        return self.mail_service.send_password_recover_code(user, reset_token.token)

    def reset_password(self, email: Optional[str], token: Optional[str], new_password: Optional[str]) -> bool:
        """Consume a valid RESET token and store `new_password`."""
        if not email or not new_password:
            return False
        user = self.user_repo.get_by_email(email)
        if not user:
            return False
        reset_token = find_valid_user_token(token, user, models.SecurityTokenType.RESET)
        if not reset_token:
            return False
        self.token_service.use_token(reset_token)
        user.encrypted_password = PWD_CTX.hash(new_password)
        user = self.user_repo.save(user)
        return self.mail_service.send_password_successfully_changed(user)

    def confirm_email(self, user_id: str, email_confirm_token: str) -> bool:
        user = self.user_repo.get_by_user_id(user_id)
        if not user or user.email_confirmed:
            return False
        confirm_token = find_valid_user_token(email_confirm_token, user, models.SecurityTokenType.EMAIL_CONFIRM)
        if not confirm_token:
            return False
        user.email_confirmed = True
        self.mail_service.send_account_confirmed(user)
        self.user_repo.save(user)
        self.token_service.use_token(confirm_token)
        return True

    def resend_email_confirm(self, user_id: str) -> bool:
        """Issue a fresh EMAIL_CONFIRM token, dropping older unused ones."""
        user = self.user_repo.get_by_user_id(user_id)
        if not user or user.email_confirmed:
            return False
        new_token = self.token_service.create_email_confirm_token(user)
        for tok in self.token_repo.list_for_owner(user.user_id, models.SecurityTokenType.EMAIL_CONFIRM):
            if not tok.is_used and tok.id != new_token.id:
                self.session.delete(tok)
        self.session.commit()
        return self.mail_service.send_account_created(user, new_token)


class HouseService:
    """Houses and their members."""
    def __init__(self, session: Session):
        self.session = session
        self.house_repo = repositories.CommunityHouseRepository(session)
        self.member_repo = repositories.HouseMemberRepository(session)

    def list_all_houses(self, pageable: Optional[PageRequest] = None) -> List[models.CommunityHouse]:
        return self.house_repo.list(pageable or PageRequest(0, 200))

    def get_house_details(self, house_id: str) -> Optional[models.CommunityHouse]:
        return self.house_repo.get_by_house_id(house_id)

    def add_house_members(self, house_id: str, member_names: Iterable[str]) -> List[models.HouseMember]:
        """Create members inside `house_id`; returns an empty list if the house is missing."""
        house = self.house_repo.get_by_house_id(house_id)
        if not house:
            return []
        members = [
            models.HouseMember(member_id=generate_unique_id(), name=name, house_id=house.house_id)
            for name in member_names
        ]
        return self.member_repo.save_all(members)

    def delete_member_from_house(self, house_id: str, member_id: str) -> bool:
        """Detach `member_id` from `house_id`; the member row itself is kept."""
        house = self.house_repo.get_by_house_id(house_id)
        if not house:
            return False
        for member in house.house_members:
            if member.member_id == member_id:
                member.house_id = None
                self.member_repo.save(member)
                return True
        return False

    def get_house_members(self, house_id: str, pageable: Optional[PageRequest] = None) -> List[models.HouseMember]:
        return self.member_repo.list_by_house(house_id, pageable)

    def list_house_members_for_houses_of_user(self, user_id: str, pageable: Optional[PageRequest] = None) -> List[models.HouseMember]:
        return self.member_repo.list_for_houses_administered_by(user_id, pageable)


class CommunityService:
    """Communities, their admins and houses."""
    def __init__(self, session: Session, house_service: Optional[HouseService] = None):
        self.session = session
        self.community_repo = repositories.CommunityRepository(session)
        self.user_repo = repositories.UserRepository(session)
        self.house_repo = repositories.CommunityHouseRepository(session)
        self.house_service = house_service or HouseService(session)

    def create_community(self, name: str, district: str, creator_user_id: Optional[str]) -> models.Community:
        """Create a community and register its creator as the first admin."""
        community = models.Community(community_id=generate_unique_id(), name=name, district=district)
        admin = self.user_repo.get_by_user_id(creator_user_id) if creator_user_id else None
        if admin:
            community.admins.append(admin)
        saved = self.community_repo.save(community)
        logger.debug("saved community with id[%s] to repository", saved.id)
        return saved

    def list_all(self, pageable: Optional[PageRequest] = None) -> List[models.Community]:
        return self.community_repo.list(pageable or PageRequest(0, 200))

    def get_community_details(self, community_id: str) -> Optional[models.Community]:
        return self.community_repo.get_by_community_id(community_id)

    def find_community_houses(self, community_id: str, pageable: Optional[PageRequest] = None) -> Optional[List[models.CommunityHouse]]:
        if not self.community_repo.exists(community_id):
            return None
        return self.house_repo.list_by_community(community_id, pageable)

    def find_community_admins(self, community_id: str, pageable: Optional[PageRequest] = None) -> Optional[List[models.User]]:
        if not self.community_repo.exists(community_id):
            return None
        return self.user_repo.list_admins_of_community(community_id, pageable)

    def find_community_admin(self, admin_id: str) -> Optional[models.User]:
        return self.user_repo.get_by_user_id(admin_id)

    def add_admins_to_community(self, community_id: str, admin_ids: Iterable[str]) -> Optional[models.Community]:
        """Add existing users as admins; unknown ids are skipped."""
        community = self.community_repo.get_by_community_id(community_id)
        if not community:
            return None
        current = {admin.user_id for admin in community.admins}
        for admin_id in admin_ids:
            if admin_id in current:
                continue
            admin = self.user_repo.get_by_user_id(admin_id)
            if admin:
                community.admins.append(admin)
                current.add(admin_id)
        return self.community_repo.save(community)

    def add_houses_to_community(self, community_id: str, house_names: Iterable[Optional[str]]) -> List[str]:
        """Create houses in the community and return their generated ids."""
        community = self.community_repo.get_by_community_id(community_id)
        if not community:
            return []
        houses = [
            models.CommunityHouse(house_id=generate_unique_id(), name=name, community_id=community.community_id)
            for name in house_names
            if name is not None
        ]
        self.house_repo.save_all(houses)
        return [house.house_id for house in houses]

    def remove_admin_from_community(self, community_id: str, admin_id: str) -> bool:
        community = self.community_repo.get_by_community_id(community_id)
        if not community:
            return False
        for admin in community.admins:
            if admin.user_id == admin_id:
                community.admins.remove(admin)
                self.community_repo.save(community)
                return True
        return False

    def remove_house_from_community(self, community: Optional[models.Community], house_id: str) -> bool:
        """Detach every member of `house_id` and delete the house."""
        if community is None:
            return False
        house = self.house_repo.get_by_house_id(house_id)
        if not house or house.community_id != community.community_id:
            return False
        member_ids = [member.member_id for member in house.house_members]
        for member_id in member_ids:
            self.house_service.delete_member_from_house(house_id, member_id)
        self.house_repo.delete(house)
        return True

    def delete_community(self, community_id: str) -> bool:
        """Delete the community with all its houses; amenities go with it."""
        community = self.community_repo.get_by_community_id(community_id)
        if not community:
            return False
        house_ids = [house.house_id for house in community.houses]
        for house_id in house_ids:
            self.remove_house_from_community(community, house_id)
        self.community_repo.delete(community)
        return True


class HouseMemberDocumentService:
    """Store a single JPEG document per house member."""
    def __init__(self, session: Session, compression_border_kb: Optional[int] = None, max_size_kb: Optional[int] = None, compressed_image_quality: Optional[float] = None):
        self.member_repo = repositories.HouseMemberRepository(session)
        self.document_repo = repositories.HouseMemberDocumentRepository(session)
        self.compression_border_kb = settings.FILES_COMPRESSION_BORDER_KB if compression_border_kb is None else compression_border_kb
        self.max_size_kb = settings.FILES_MAX_SIZE_KB if max_size_kb is None else max_size_kb
        self.compressed_image_quality = settings.FILES_COMPRESSED_IMAGE_QUALITY if compressed_image_quality is None else compressed_image_quality

    def find_house_member_document(self, member_id: str) -> Optional[models.HouseMemberDocument]:
        member = self.member_repo.get_by_member_id(member_id)
        if not member:
            return None
        return member.house_member_document

    def delete_house_member_document(self, member_id: str) -> bool:
        member = self.member_repo.get_by_member_id(member_id)
        if not member or member.house_member_document is None:
            return False
        member.house_member_document = None
        self.member_repo.save(member)
        return True

    def create_house_member_document(self, payload: bytes, member_id: str) -> Optional[models.HouseMemberDocument]:
        return self._store_document(payload, member_id)

    def update_house_member_document(self, payload: bytes, member_id: str) -> Optional[models.HouseMemberDocument]:
        return self._store_document(payload, member_id)

    def _store_document(self, payload: bytes, member_id: str) -> Optional[models.HouseMemberDocument]:
        """Encode `payload` as JPEG and attach it to the member.

        Returns `None` when the member does not exist or the encoded image
        is not smaller than the size limit; undecodable payloads raise
        `DocumentSaveError`.
        """
        member = self.member_repo.get_by_member_id(member_id)
        if not member:
            return None
        content = encode_document_image(payload, self.compression_border_kb * 1024, self.compressed_image_quality)
        if len(content) >= self.max_size_kb * 1024:
            logger.info("document for member %s rejected: %d bytes after encoding", member_id, len(content))
            return None
        filename = f"member_{member.member_id}_document.jpg"
        document = member.house_member_document
        if document is None:
            document = models.HouseMemberDocument(document_filename=filename, document_content=content)
        else:
            # overwrite in place; the filename is unique per member
            document.document_filename = filename
            document.document_content = content
        document = self.document_repo.save(document)
        member.house_member_document = document
        self.member_repo.save(member)
        return document


class AmenityService:
    """Amenities offered by a community."""
    def __init__(self, session: Session):
        self.amenity_repo = repositories.AmenityRepository(session)
        self.community_repo = repositories.CommunityRepository(session)

    def create_amenities(self, amenities: Iterable[dict], community_id: str) -> Optional[List[models.Amenity]]:
        """Create amenities (dicts of name/description/price) for a community.

        Returns `None` when the community does not exist.
        """
        community = self.community_repo.get_by_community_id(community_id)
        if not community:
            return None
        created = [
            models.Amenity(
                amenity_id=generate_unique_id(),
                name=a["name"],
                description=a["description"],
                price=Decimal(a.get("price") or 0),
                community_id=community.community_id,
            )
            for a in amenities
        ]
        return self.amenity_repo.save_all(created)

    def get_amenity_details(self, amenity_id: str) -> Optional[models.Amenity]:
        return self.amenity_repo.get_by_amenity_id(amenity_id)

    def delete_amenity(self, amenity_id: str) -> bool:
        amenity = self.amenity_repo.get_by_amenity_id(amenity_id)
        if not amenity:
            return False
        self.amenity_repo.delete(amenity)
        return True

    def list_all_amenities(self, community_id: str) -> List[models.Amenity]:
        return self.amenity_repo.list_by_community(community_id)

    def update_amenity(self, amenity_id: str, name: str, description: str, price: Decimal, community_id: str) -> bool:
        """Overwrite name/description/price; the target community must exist."""
        amenity = self.amenity_repo.get_by_amenity_id(amenity_id)
        if not amenity:
            return False
        community = self.community_repo.get_by_community_id(community_id)
        if not community:
            return False
        amenity.name = name
        amenity.description = description
        amenity.price = price
        amenity.community_id = community.community_id
        self.amenity_repo.save(amenity)
        return True


class BookingService:
    def __init__(self, session: Session):
        self.booking_repo = repositories.AmenityBookingItemRepository(session)

    def delete_booking(self, amenity_id: str, booking_id: str) -> bool:
        """Delete `booking_id` only if it belongs to `amenity_id`."""
        booking = self.booking_repo.get_by_booking_id(booking_id)
        if not booking or booking.amenity_id != amenity_id:
            return False
        self.booking_repo.delete(booking)
        return True


class PaymentService:
    """Payments scheduled by community admins for house members."""
    def __init__(self, session: Session):
        self.payment_repo = repositories.PaymentRepository(session)
        self.member_repo = repositories.HouseMemberRepository(session)

    def schedule_payment(self, admin: models.User, member: models.HouseMember, charge: Decimal, type: str, description: str, recurring: bool, due_date: Optional[date]) -> models.Payment:
        payment = models.Payment(
            payment_id=generate_unique_id(),
            charge=charge,
            type=type,
            description=description,
            recurring=recurring,
            due_date=due_date,
            admin_id=admin.user_id,
            member_id=member.member_id,
        )
        return self.payment_repo.save(payment)

    def get_payment_details(self, payment_id: str) -> Optional[models.Payment]:
        return self.payment_repo.get_by_payment_id(payment_id)

    def get_house_member(self, member_id: str) -> Optional[models.HouseMember]:
        return self.member_repo.get_by_member_id(member_id)

    def get_payments_by_member(self, member_id: str) -> List[models.Payment]:
        return self.payment_repo.list_by_member(member_id)

    def get_payments_by_admin(self, admin_id: str, pageable: PageRequest) -> Tuple[List[models.Payment], int]:
        return self.payment_repo.page_by_admin(admin_id, pageable)

    @staticmethod
    def is_user_admin_of_member_house(member: models.HouseMember, admin: models.User) -> bool:
        """True when `admin` administers the community of the member's house."""
        house = member.community_house
        if house is None or house.community is None:
            return False
        return any(a.user_id == admin.user_id for a in house.community.admins)
