"""Core data models for the Job Board."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from math import ceil
from typing import Annotated, Any, Dict, Generic, List, Literal, Mapping, Optional, TypeVar, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    HttpUrl,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from job_board.core.errors import ValidationFailed


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

T = TypeVar("T")


class Role(str, Enum):
    """Account roles."""
    ADMIN = "ADMIN"
    USER = "USER"


class JobStatus(str, Enum):
    """Lifecycle states of a job posting."""
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    DRAFT = "DRAFT"


class ApplicationStatus(str, Enum):
    """Review states of an application. Any state may move to any other."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    ON_HOLD = "ON_HOLD"


# Sentinel accepted by job listing to disable the status filter
ALL_STATUSES = "ALL"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, passed explicitly into every service call."""
    user_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_user(self) -> bool:
        return self.role == Role.USER


class CamelModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Custom fields: tagged union on ``type``

class _CustomFieldBase(CamelModel):
    id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()), description="Question identifier")
    label: NonEmptyStr = Field(..., description="Question shown to applicants")
    required: bool = Field(False, description="Whether an answer is mandatory")


class TextField(_CustomFieldBase):
    type: Literal["text"] = "text"


class TextareaField(_CustomFieldBase):
    type: Literal["textarea"] = "textarea"


class _ChoiceFieldBase(_CustomFieldBase):
    options: List[NonEmptyStr] = Field(..., min_length=1, description="Allowed answers")


class SelectField(_ChoiceFieldBase):
    type: Literal["select"] = "select"


class RadioField(_ChoiceFieldBase):
    type: Literal["radio"] = "radio"


CustomField = Annotated[
    Union[TextField, TextareaField, SelectField, RadioField],
    Field(discriminator="type"),
]

_custom_fields_adapter = TypeAdapter(List[CustomField])


def load_custom_fields(raw: Optional[List[Mapping[str, Any]]]) -> List[Any]:
    """Rebuild typed question definitions from their stored documents."""
    return _custom_fields_adapter.validate_python(raw or [])


# Request payloads

class JobPayload(CamelModel):
    """Job posting fields accepted on create and full update."""
    title: NonEmptyStr
    department: NonEmptyStr
    location: NonEmptyStr
    salary: Optional[str] = None
    description: NonEmptyStr
    requirements: NonEmptyStr
    resume_required: bool = False
    custom_fields: List[CustomField] = Field(default_factory=list)
    status: JobStatus = JobStatus.ACTIVE

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _default_fields(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("custom_fields")
    @classmethod
    def _unique_field_ids(cls, value: List[Any]) -> List[Any]:
        ids = [f.id for f in value]
        if len(ids) != len(set(ids)):
            raise ValueError("Custom field ids must be unique")
        return value


class ApplicationPayload(CamelModel):
    job_id: NonEmptyStr
    answers: Dict[str, Any] = Field(default_factory=dict)
    resume_url: Optional[HttpUrl] = None

    @field_validator("answers", mode="before")
    @classmethod
    def _default_answers(cls, value: Any) -> Any:
        return {} if value is None else value


class StatusUpdatePayload(CamelModel):
    status: ApplicationStatus
    notes: Optional[str] = Field(None, max_length=2000)


class JobStatusPayload(CamelModel):
    status: JobStatus


class ProfileUpdatePayload(CamelModel):
    """Editable profile fields. Unknown keys, role included, are rejected."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]] = None
    phone: Optional[Annotated[str, StringConstraints(pattern=r"^\+?[1-9]\d{1,14}$")]] = None
    location: Optional[Annotated[str, StringConstraints(max_length=100)]] = None


class UserCreatePayload(CamelModel):
    email: EmailStr
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
    role: Role = Role.USER
    phone: Optional[Annotated[str, StringConstraints(pattern=r"^\+?[1-9]\d{1,14}$")]] = None
    location: Optional[Annotated[str, StringConstraints(max_length=100)]] = None


def parse_payload(model: type, data: Union[BaseModel, Mapping[str, Any]]) -> Any:
    """Validate raw input into ``model``, converting failures to ValidationFailed."""
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=False)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e) from e


def validate_answers(custom_fields: List[Any], answers: Mapping[str, Any]) -> Dict[str, str]:
    """
    Check answers against a job's questions.

    Args:
        custom_fields: The job's validated custom field definitions
        answers: Raw answers keyed by field id

    Returns:
        Cleaned answers for known fields only

    Raises:
        ValidationFailed: keyed ``answers.<field id>``
    """
    errors: Dict[str, List[str]] = {}
    cleaned: Dict[str, str] = {}

    for field in custom_fields:
        key = f"answers.{field.id}"
        value = answers.get(field.id)

        if value is None or (isinstance(value, str) and not value.strip()):
            if field.required:
                errors[key] = [f"{field.label} is required"]
            continue

        if not isinstance(value, str):
            errors[key] = ["Answer must be text"]
            continue

        if isinstance(field, (SelectField, RadioField)) and value not in field.options:
            errors[key] = ["Answer must be one of the listed options"]
            continue

        cleaned[field.id] = value

    if errors:
        raise ValidationFailed(errors)
    return cleaned


# Read models

class ReadModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserSummary(ReadModel):
    name: str
    email: str


class UserRead(ReadModel):
    id: str
    email: str
    name: str
    role: Role
    phone: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime


class JobSummary(ReadModel):
    id: str
    title: str
    department: str
    location: str


class StatusLogRead(ReadModel):
    id: int
    application_id: str
    status: ApplicationStatus
    notes: Optional[str] = None
    created_at: datetime


class ApplicationRead(ReadModel):
    id: str
    job_id: str
    user_id: str
    answers: Dict[str, Any] = Field(default_factory=dict)
    resume_url: Optional[str] = None
    status: ApplicationStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    job: Optional[JobSummary] = None
    applicant: Optional[UserSummary] = None
    status_logs: List[StatusLogRead] = Field(default_factory=list)


class JobRead(ReadModel):
    id: str
    title: str
    department: str
    location: str
    salary: Optional[str] = None
    description: str
    requirements: str
    resume_required: bool
    custom_fields: List[CustomField] = Field(default_factory=list)
    status: JobStatus
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    poster: Optional[UserSummary] = None
    applicant_count: int = 0
    applications: Optional[List[ApplicationRead]] = None


class Page(CamelModel, Generic[T]):
    """One page of results with totals."""
    items: List[T]
    total: int
    page: int
    limit: int

    @computed_field
    @property
    def pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0
