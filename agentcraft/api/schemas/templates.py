"""Template catalog schemas."""

from pydantic import BaseModel, ConfigDict


class TemplateResponse(BaseModel):
    """Catalog entry as shown to users; the prompt text stays server-side."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    category: str
