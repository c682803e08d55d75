import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from app.helpers.enums import Frequency
from app.helpers.exception_handler import FormValidationError
from app.schemas.sche_medication import MedicationCreateRequest, validate_medication
from app.services.srv_medication import MedicationService

logger = logging.getLogger(__name__)

DEFAULT_VALUES = {
    'medication_name': '',
    'frequency': Frequency.DAILY.value,
    'time_to_take': '',
}

SubmitHandler = Callable[[MedicationCreateRequest], Awaitable[Any]]


class MedicationFormController:
    """
    Field values and per-field errors of the add-medication form.

    submit() only calls its handler with validated data. The form is reset
    and closed once the handler completes; if the handler raises, values are
    kept, submit_error is set and the exception propagates.
    """

    def __init__(self, on_close: Optional[Callable[[], None]] = None):
        self.on_close = on_close
        self.values: Dict[str, Any] = dict(DEFAULT_VALUES)
        self.errors: Dict[str, str] = {}
        self.submit_error: Optional[Exception] = None
        self.is_submitting = False

    def set_value(self, field: str, value: Any) -> None:
        if field not in DEFAULT_VALUES:
            raise KeyError(f"Unknown form field: {field}")
        self.values[field] = value
        self.errors.pop(field, None)

    def reset(self) -> None:
        self.values = dict(DEFAULT_VALUES)
        self.errors = {}
        self.submit_error = None

    def validate(self) -> Optional[MedicationCreateRequest]:
        try:
            validated = validate_medication(self.values)
        except FormValidationError as e:
            self.errors = e.field_messages()
            return None
        self.errors = {}
        return validated

    async def submit(self, handler: SubmitHandler) -> bool:
        validated = self.validate()
        if validated is None:
            logger.info(f"medication form invalid: fields={sorted(self.errors)}")
            return False

        self.is_submitting = True
        self.submit_error = None
        try:
            await handler(validated)
        except Exception as e:
            self.submit_error = e
            raise
        finally:
            self.is_submitting = False

        self.reset()
        if self.on_close:
            self.on_close()
        return True


class MedicationFormDialog:
    """Add-medication dialog: forwards the form's validated data to the add mutation."""

    def __init__(self, medication_service: MedicationService):
        self.medication_service = medication_service
        self.is_open = False
        self.form = MedicationFormController(on_close=self.close)

    @property
    def is_loading(self) -> bool:
        return self.medication_service.add_medication.is_pending

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    async def submit(self) -> bool:
        return await self.form.submit(self.medication_service.add_medication.mutate_async)
