from sqlmodel import SQLModel


# JSON payload containing access token and refresh token
class Token(SQLModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class RefreshTokenRequest(SQLModel):
    refresh_token: str
