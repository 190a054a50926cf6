from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """Base de todos los esquemas: camelCase en JSON, snake_case en Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Address(CamelModel):
    street: str = ""
    number: Optional[int] = None
    postal: Optional[int] = None
    city: str = ""
    province: str = ""


class UserRef(CamelModel):
    id: int
    name: str = ""
    email: str
