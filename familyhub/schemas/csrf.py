from pydantic import BaseModel


class CSRFTokenResponse(BaseModel):
    token: str
