from pydantic import BaseModel, Field


class SessionResponse(BaseModel):
    user_id: str = Field(alias="userId")
    csrf_token: str = Field(alias="csrfToken")
    state: str

    class Config:
        populate_by_name = True
