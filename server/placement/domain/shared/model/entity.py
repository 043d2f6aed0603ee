from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Identity-bearing domain object. Mutable, compared by field values."""

    model_config = ConfigDict(arbitrary_types_allowed=True)
