"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. JSON field names are camelCase on the
wire; Python code uses snake_case attribute names.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model serialising to camelCase and accepting either spelling."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# users / auth

class CreateUserRequest(ApiModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=8, max_length=80)


class CreateUserResponse(ApiModel):
    user_id: str
    name: str
    email: str


class UserOut(ApiModel):
    user_id: str
    name: str
    email: str
    community_ids: List[str] = []


class GetUserDetailsResponse(ApiModel):
    users: List[UserOut]


class LoginRequest(ApiModel):
    email: str
    password: str


class PasswordActionType(str, Enum):
    FORGOT = "FORGOT"
    RESET = "RESET"


class ForgotPasswordRequest(ApiModel):
    """Body of `POST /users/password`; `token`/`new_password` only for RESET."""
    email: str
    token: Optional[str] = None
    new_password: Optional[str] = None


# communities / houses / members

class CreateCommunityRequest(ApiModel):
    name: str = Field(min_length=2, max_length=100)
    district: str = Field(min_length=2, max_length=100)


class CreateCommunityResponse(ApiModel):
    community_id: str


class CommunityOut(ApiModel):
    community_id: str
    name: str
    district: str


class GetCommunityDetailsResponse(ApiModel):
    communities: List[CommunityOut]


class CommunityAdminOut(ApiModel):
    admin_id: str


class ListCommunityAdminsResponse(ApiModel):
    admins: List[CommunityAdminOut]


class AddCommunityAdminRequest(ApiModel):
    admins: List[str]


class AddCommunityAdminResponse(ApiModel):
    admins: List[str]


class HouseOut(ApiModel):
    house_id: str
    name: str


class GetHouseDetailsResponse(ApiModel):
    houses: List[HouseOut]


class HouseNameIn(ApiModel):
    name: Optional[str] = None


class AddCommunityHouseRequest(ApiModel):
    houses: List[HouseNameIn]


class AddCommunityHouseResponse(ApiModel):
    houses: List[str]


class HouseMemberIn(ApiModel):
    name: str


class HouseMemberOut(ApiModel):
    member_id: str
    name: str


class AddHouseMemberRequest(ApiModel):
    members: List[HouseMemberIn]


class HouseMembersResponse(ApiModel):
    """Used by `GET /houses/{id}/members`, housemates and `POST` members."""
    members: List[HouseMemberOut]


# amenities

class AmenityIn(ApiModel):
    name: str
    description: str
    price: Decimal = Decimal(0)


class AmenityOut(ApiModel):
    amenity_id: str
    name: str
    description: str
    price: Decimal
    community_id: Optional[str] = None


class AddAmenityRequest(ApiModel):
    amenities: List[AmenityIn]


class AmenitiesResponse(ApiModel):
    amenities: List[AmenityOut]


class UpdateAmenityRequest(ApiModel):
    name: str
    description: str
    price: Decimal
    community_id: str


# payments

class SchedulePaymentRequest(ApiModel):
    charge: Decimal
    type: str
    description: str
    recurring: bool = False
    due_date: date
    admin_id: str
    member_id: str


class PaymentOut(ApiModel):
    payment_id: str
    charge: Decimal
    type: str
    description: str
    recurring: bool
    due_date: Optional[date] = None
    admin_id: str
    member_id: str


class ListMemberPaymentsResponse(ApiModel):
    payments: List[PaymentOut]


class PageInfoOut(ApiModel):
    current_page: int
    page_limit: int
    total_pages: int
    total_elements: int


class ListAdminPaymentsResponse(ApiModel):
    payments: List[PaymentOut]
    page_info: PageInfoOut
