from pydantic import BaseModel

class CloudUser(BaseModel):
    id: str
    email: str
    display_name: str

class LoginUrlResponse(BaseModel):
    url: str
    provider: str = "google"
    scopes: str

class LogoutResponse(BaseModel):
    signed_out: bool
