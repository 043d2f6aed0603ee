from typing import Any, TypeVar

import pydantic
from fastapi.exceptions import RequestValidationError

M = TypeVar("M", bound=pydantic.BaseModel)


def build(model: type[M], body: dict[str, Any], **path: Any) -> M:
    """Validate a request body merged with path parameters into a command.

    Path parameters win over body keys of the same name.
    """
    try:
        return model.model_validate({**body, **path})
    except pydantic.ValidationError as e:
        raise RequestValidationError(e.errors()) from e
