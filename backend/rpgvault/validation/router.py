# backend/rpgvault/validation/router.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from ..deps import get_validator
from .schemas import SchemaCheckOut, SchemaIn, ValidateIn, ValidationOut
from .service import SchemaValidator

router = APIRouter(prefix="/validation", tags=["validation"])


@router.post("/validate", response_model=ValidationOut)
def validate(payload: ValidateIn, validator: SchemaValidator = Depends(get_validator)):
    return ValidationOut.from_errors(validator.validate(payload.data, payload.json_schema))


@router.post("/schema-check", response_model=SchemaCheckOut)
def schema_check(payload: SchemaIn, validator: SchemaValidator = Depends(get_validator)):
    return SchemaCheckOut(valid=validator.is_valid_schema(payload.json_schema))


@router.post("/ruleset", response_model=ValidationOut)
def validate_ruleset(payload: SchemaIn, validator: SchemaValidator = Depends(get_validator)):
    return ValidationOut.from_errors(validator.validate_ruleset_schema(payload.json_schema))


@router.get("/schemas")
def list_common_schemas(validator: SchemaValidator = Depends(get_validator)) -> Dict[str, Any]:
    return validator.common_schemas()


@router.post("/schemas/{name}", response_model=ValidationOut)
def validate_against_common(
    name: str,
    data: Any = Body(...),
    validator: SchemaValidator = Depends(get_validator),
):
    schemas = validator.common_schemas()
    if name not in schemas:
        raise HTTPException(404, f"Unknown schema '{name}'. Available: {', '.join(schemas)}")
    return ValidationOut.from_errors(validator.validate(data, schemas[name]))
