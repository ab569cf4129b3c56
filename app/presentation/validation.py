from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    create_model,
)
from pydantic.networks import validate_email

from app.domain.errors import FieldViolation, ValidationFailed

FieldKind = Literal["text", "number", "integer", "boolean"]

_MISSING: Any = object()
_URI = TypeAdapter(AnyUrl)
_OWN_MESSAGE_ERRORS = {"missing", "greater_than_equal", "less_than_equal"}


@dataclass(frozen=True)
class FieldRule:
    name: str
    kind: FieldKind = "text"
    required: bool = False
    default: Any = _MISSING
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    format: Optional[Literal["email", "uri"]] = None
    choices: Optional[tuple[str, ...]] = None

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING


def _email(value: str) -> str:
    _, address = validate_email(value)
    return address


def _uri(value: str) -> str:
    try:
        _URI.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid uri") from None
    return value


def _annotation(rule: FieldRule) -> Any:
    if rule.kind == "boolean":
        return bool

    bounds = Field(ge=rule.min_value, le=rule.max_value)
    if rule.kind == "integer":
        return Annotated[int, bounds]
    if rule.kind == "number":
        # int first so whole numbers keep their type in the response
        return Union[
            Annotated[int, bounds],
            Annotated[float, bounds, Field(allow_inf_nan=False)],
        ]

    text: Any = Annotated[str, Field(min_length=1, max_length=rule.max_length)]
    if rule.choices:
        text = Annotated[text, AfterValidator(_one_of(rule.choices))]
    if rule.format == "email":
        text = Annotated[text, AfterValidator(_email)]
    elif rule.format == "uri":
        text = Annotated[text, AfterValidator(_uri)]
    return text


def _one_of(choices: tuple[str, ...]):
    def check(value: str) -> str:
        if value not in choices:
            raise ValueError(f"must be one of: {', '.join(choices)}")
        return value

    return check


def _message(error: dict[str, Any]) -> str:
    kind = error["type"]
    if kind == "missing":
        return "is required"
    if kind == "extra_forbidden":
        return "is not allowed"
    msg = str(error["msg"])
    return msg.removeprefix("Value error, ")


class RequestValidator:
    """
    Checks a JSON body against an ordered list of field rules.

    The rules are compiled once into a pydantic model; unknown fields are
    rejected, absent optional fields stay absent, and defaults are filled in.
    Every violated field is reported, not just the first.
    """

    def __init__(self, rules: tuple[FieldRule, ...], *, name: str = "Body") -> None:
        self.rules = rules
        self._by_name = {r.name: r for r in rules}
        self._defaults = {r.name for r in rules if r.has_default}
        fields: dict[str, Any] = {}
        for rule in rules:
            if rule.required:
                default = ...
            elif rule.has_default:
                default = rule.default
            else:
                default = None
            fields[rule.name] = (_annotation(rule), default)
        self._model: type[BaseModel] = create_model(
            name, __config__=ConfigDict(extra="forbid"), **fields
        )

    def validate(self, body: Any) -> dict[str, Any]:
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ValidationFailed([FieldViolation("body", "must be a JSON object")])
        try:
            parsed = self._model.model_validate(body)
        except ValidationError as e:
            # union types (number) report one error per member; keep the first
            by_field: dict[str, str] = {}
            for err in e.errors():
                field = str(err["loc"][0]) if err["loc"] else "body"
                by_field.setdefault(field, self._message(field, err))
            raise ValidationFailed(
                [FieldViolation(f, m) for f, m in by_field.items()]
            ) from None

        keep = parsed.model_fields_set | self._defaults
        return {k: v for k, v in parsed.model_dump().items() if k in keep}

    def _message(self, field: str, error: dict[str, Any]) -> str:
        rule = self._by_name.get(field)
        if (
            rule is not None
            and rule.kind == "number"
            and error["type"] not in _OWN_MESSAGE_ERRORS
        ):
            return "must be a number"
        return _message(error)
