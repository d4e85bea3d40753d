from pydantic import BaseModel, EmailStr, Field, field_validator


class Credentials(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        # Accounts are looked up case-insensitively
        return v.strip().lower()


class SignupIn(Credentials):
    password: str = Field(min_length=6, max_length=72)


class LoginIn(Credentials):
    pass


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
