from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel
from typing import Annotated

# Emails are stored and compared in lower case everywhere
NormalizedEmail = Annotated[EmailStr, AfterValidator(str.lower)]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python; accepts either on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(ApiModel):
    message: str
