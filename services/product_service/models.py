from pydantic import BaseModel, Field


class Product(BaseModel):
    id: int = Field(gt=0)
    name: str
    price: int = Field(ge=0, description="Price in minor currency units")
    image: str
    description: str
    stock: int = Field(ge=0)

    class Config:
        frozen = True
