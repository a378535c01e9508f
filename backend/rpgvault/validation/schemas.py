# backend/rpgvault/validation/schemas.py
from typing import Any, List

from pydantic import Field

from ..shared.schemas import ApiModel


class ValidateIn(ApiModel):
    data: Any = None
    # pydantic BaseModel.schema 와 이름이 겹쳐서 alias 로 받는다
    json_schema: Any = Field(alias="schema")


class SchemaIn(ApiModel):
    json_schema: Any = Field(alias="schema")


class ValidationOut(ApiModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationOut":
        return cls(valid=not errors, errors=errors)


class SchemaCheckOut(ApiModel):
    valid: bool
