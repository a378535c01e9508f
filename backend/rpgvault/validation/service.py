# backend/rpgvault/validation/service.py
from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

from jsonschema import Draft7Validator, FormatChecker, validators
from jsonschema.exceptions import SchemaError, ValidationError
from jsonschema.protocols import Validator
from referencing import Registry

from .catalog import RULESET_META_SCHEMA, common_schemas

logger = logging.getLogger(__name__)

_FORMAT_CHECKER = FormatChecker()
# 원격 $ref 는 가져오지 않는다. 문서 안의 참조만 해석
_NO_REMOTE_REFS = Registry()


@dataclass(frozen=True)
class CompileResult:
    validator: Optional[Validator] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.validator is not None


# 키 순서 유지: 위반 메시지가 스키마 작성 순서를 따른다
@lru_cache(maxsize=256)
def _compile_serialized(serialized: str) -> CompileResult:
    schema = json.loads(serialized)
    # $schema 이 없으면 draft-07. 모르는 키워드는 무시(non-strict)
    try:
        cls = validators.validator_for(schema, default=Draft7Validator)
        cls.check_schema(schema)
        validator = cls(schema, format_checker=_FORMAT_CHECKER, registry=_NO_REMOTE_REFS)
    except SchemaError as e:
        return CompileResult(error=e.message)
    except Exception as e:  # $schema 값이 이상한 경우 등
        logger.warning("schema compile failed: %s", e)
        return CompileResult(error=str(e))
    return CompileResult(validator=validator)


def compile_schema(schema: Any) -> CompileResult:
    if not isinstance(schema, (dict, bool)):
        return CompileResult(error=f"schema must be an object or boolean, got {json_type(schema)}")
    try:
        serialized = json.dumps(schema)
    except (TypeError, ValueError) as e:
        return CompileResult(error=f"schema is not JSON serializable: {e}")
    return _compile_serialized(serialized)


def json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def instance_path(error: ValidationError) -> str:
    """JSON pointer (/abilities/strength). 루트는 'root'."""
    parts = [str(p).replace("~", "~0").replace("/", "~1") for p in error.absolute_path]
    return "/" + "/".join(parts) if parts else "root"


def _display(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def format_errors(errors: Iterable[ValidationError]) -> List[str]:
    messages: List[str] = []
    # required 는 누락 속성마다 하나씩, 목록 순서대로 나온다
    required_seen: Dict[tuple, int] = {}

    for error in errors:
        path = instance_path(error)
        keyword = error.validator
        limit = error.validator_value

        if keyword == "required":
            key = (tuple(error.absolute_path), json.dumps(limit))
            missing = [p for p in limit if isinstance(error.instance, dict) and p not in error.instance]
            idx = required_seen.get(key, 0)
            required_seen[key] = idx + 1
            prop = missing[min(idx, len(missing) - 1)] if missing else ""
            messages.append(f"Missing required property '{prop}' at {path}")
        elif keyword == "type":
            expected = ",".join(limit) if isinstance(limit, list) else limit
            messages.append(
                f"Property at {path} should be {expected}, but got {json_type(error.instance)}"
            )
        elif keyword == "enum":
            allowed = ", ".join(_display(v) for v in limit)
            messages.append(f"Property at {path} should be one of: {allowed}")
        elif keyword == "minimum":
            messages.append(f"Property at {path} should be >= {limit}")
        elif keyword == "maximum":
            messages.append(f"Property at {path} should be <= {limit}")
        elif keyword == "minLength":
            messages.append(f"Property at {path} should have at least {limit} characters")
        elif keyword == "maxLength":
            messages.append(f"Property at {path} should have at most {limit} characters")
        elif keyword == "minItems":
            messages.append(f"Array at {path} should have at least {limit} items")
        elif keyword == "maxItems":
            messages.append(f"Array at {path} should have at most {limit} items")
        elif keyword == "format":
            messages.append(f"Property at {path} should match format '{limit}'")
        elif keyword == "pattern":
            messages.append(f"Property at {path} should match pattern '{limit}'")
        else:
            messages.append(f"Validation error at {path}: {error.message}")
    return messages


class SchemaValidator:
    """JSON Schema 검증. 절대 예외를 올리지 않고 위반 메시지 목록을 돌려준다."""

    def compile(self, schema: Any) -> CompileResult:
        return compile_schema(schema)

    def validate(self, data: Any, schema: Any) -> List[str]:
        compiled = self.compile(schema)
        if not compiled.ok:
            return [f"Schema validation error: {compiled.error}"]
        try:
            errors = list(compiled.validator.iter_errors(data))
        except Exception as e:  # 미해결 $ref 등은 검증 시점에 터진다
            logger.warning("schema evaluation failed: %s", e)
            return [f"Schema validation error: {e}"]
        return format_errors(errors)

    def is_valid_schema(self, schema: Any) -> bool:
        return self.compile(schema).ok

    def validate_ruleset_schema(self, schema: Any) -> List[str]:
        return self.validate(schema, RULESET_META_SCHEMA)

    def common_schemas(self) -> Dict[str, Dict[str, Any]]:
        return common_schemas()
