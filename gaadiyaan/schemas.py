# gaadiyaan/schemas.py
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    total: int
    total_pages: int
    current_page: int
    has_more: bool
    limit: int


class ListingPage(CamelModel):
    success: bool = True
    data: List[Dict[str, Any]]
    pagination: Pagination


class ListingResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Dict[str, Any]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DealerIdResponse(BaseModel):
    success: bool = True
    dealer_id: str


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    role: str = "client"
    dealer_id: Optional[str] = Field(None, validation_alias=AliasChoices("dealer_id", "dealerId"))


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdate(BaseModel):
    username: str
    email: Optional[str] = None
    dealership_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("dealership_name", "dealershipName")
    )
    phone: Optional[str] = None
    full_name: Optional[str] = Field(None, validation_alias=AliasChoices("full_name", "fullName"))


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    dealer_id: Optional[str] = None
    dealership_name: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None


class UserResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: UserOut


class UserList(BaseModel):
    success: bool = True
    users: List[UserOut]


class TokenResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user: UserOut


class DealerProfileIn(BaseModel):
    email: str
    full_name: str
    dealership_name: Optional[str] = None
    phone: Optional[str] = None
    dealer_id: Optional[str] = None
    business_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    gst_number: Optional[str] = None
    user_type: Optional[str] = Field(None, validation_alias=AliasChoices("user_type", "userType"))


class DealerProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    dealership_name: Optional[str] = None
    phone: Optional[str] = None
    dealer_id: Optional[str] = None
    business_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    gst_number: Optional[str] = None
    user_type: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DealerProfileResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    dealer: DealerProfileOut


class CallbackIn(BaseModel):
    name: str
    phone: str


class CallbackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    created_at: Optional[datetime] = None


class CallbackResponse(BaseModel):
    success: bool = True
    message: str = "Callback request created successfully"
    callback: CallbackOut


class CallbackList(BaseModel):
    success: bool = True
    callbacks: List[CallbackOut]
