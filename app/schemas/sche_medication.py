from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from app.helpers.enums import Frequency
from app.helpers.exception_handler import FormValidationError
from app.schemas.sche_base import to_field_errors

FREQUENCY_OPTIONS = [f.value for f in Frequency]

MEDICATION_NAME_MIN_LENGTH = 2


class MedicationBase(BaseModel):
    medication_name: str
    frequency: Frequency
    time_to_take: str

    @field_validator('medication_name', mode='before')
    @classmethod
    def check_medication_name(cls, value: Any) -> str:
        if value is None:
            raise PydanticCustomError('required', 'Please enter a medication name')
        if not isinstance(value, str):
            raise PydanticCustomError('invalid', 'Medication name must be text')
        if len(value) < MEDICATION_NAME_MIN_LENGTH:
            raise PydanticCustomError('too_short', 'Medication name must be at least 2 characters')
        return value

    @field_validator('frequency', mode='before')
    @classmethod
    def check_frequency(cls, value: Any) -> Frequency:
        if isinstance(value, Frequency):
            return value
        if isinstance(value, str) and value in FREQUENCY_OPTIONS:
            return Frequency(value)
        raise PydanticCustomError('invalid_enum', 'Please select a valid frequency')

    @field_validator('time_to_take', mode='before')
    @classmethod
    def check_time_to_take(cls, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise PydanticCustomError('required', 'Please specify a time to take the medication')
        if not isinstance(value, str):
            raise PydanticCustomError('invalid', 'Time to take must be text')
        return value


class MedicationCreateRequest(MedicationBase):
    # Missing fields go through the validators so they report the form's own messages
    medication_name: str = Field(default=None, validate_default=True)
    frequency: Frequency = Field(default=None, validate_default=True)
    time_to_take: str = Field(default=None, validate_default=True)
    # Accepted for form compatibility; the owner always comes from the current identity
    user_id: Optional[str] = None

    def to_remote_payload(self) -> dict:
        return self.model_dump(mode='json', exclude={'user_id'})


class MedicationUpdateRequest(MedicationBase):
    medication_name: Optional[str] = None
    frequency: Optional[Frequency] = None
    time_to_take: Optional[str] = None

    @model_validator(mode='after')
    def check_not_empty(self):
        if not self.model_fields_set:
            raise PydanticCustomError('required', 'Provide at least one field to update')
        return self

    def to_remote_payload(self) -> dict:
        return self.model_dump(mode='json', exclude_unset=True)


class MedicationResponse(MedicationBase):
    id: str
    user_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


def validate_medication(candidate: Mapping[str, Any]) -> MedicationCreateRequest:
    """
    Validate raw form values for a new medication.

    Raises:
        FormValidationError: with one field error per failed rule.
    """
    try:
        return MedicationCreateRequest.model_validate(dict(candidate))
    except ValidationError as e:
        raise FormValidationError(errors=to_field_errors(e.errors()))


def validate_medication_update(candidate: Mapping[str, Any]) -> MedicationUpdateRequest:
    try:
        return MedicationUpdateRequest.model_validate(dict(candidate))
    except ValidationError as e:
        raise FormValidationError(errors=to_field_errors(e.errors()))
