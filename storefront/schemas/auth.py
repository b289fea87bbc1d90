# storefront/schemas/auth.py
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credentials(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=72)  # bcrypt учитывает только 72 байта

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v


class RegisterOut(BaseModel):
    id: str
    email: str


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
