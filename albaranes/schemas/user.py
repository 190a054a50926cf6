from pydantic import EmailStr, Field
from typing import Optional

from albaranes.schemas.common import Address, CamelModel

PASSWORD_MIN_LENGTH = 8


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    autonomo: bool = False


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class ValidationCodeRequest(CamelModel):
    code: str = Field(pattern=r"^\d{6}$")


class PersonalDataRequest(CamelModel):
    name: str = Field(min_length=1)
    surnames: str = Field(min_length=1)
    nif: str = Field(min_length=1)
    address: Address


class CompanyDataRequest(CamelModel):
    # Obligatorios salvo para autónomos; se comprueba en el servicio
    company_name: Optional[str] = None
    cif: Optional[str] = None
    street: Optional[str] = None
    number: Optional[int] = None
    postal: Optional[int] = None
    city: Optional[str] = None
    province: Optional[str] = None


class Company(CamelModel):
    name: str = ""
    cif: str = ""
    street: str = ""
    number: Optional[int] = None
    postal: Optional[int] = None
    city: str = ""
    province: str = ""


class InviteRequest(CamelModel):
    email: EmailStr


class RecoveryRequest(CamelModel):
    email: EmailStr


class PasswordResetRequest(CamelModel):
    code: str = Field(pattern=r"^\d{6}$")
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class SessionUser(CamelModel):
    id: int
    email: str
    role: str
    status: int


class ProfileOut(CamelModel):
    id: int
    email: str
    role: str
    status: int
    is_autonomo: bool = False
    name: str = ""
    surnames: str = ""
    nif: str = ""
    address: Optional[Address] = None
    company: Optional[Company] = None
    logo: str = ""
