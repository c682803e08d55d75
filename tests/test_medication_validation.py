import pytest

from app.helpers.enums import Frequency
from app.helpers.exception_handler import FormValidationError
from app.schemas.sche_medication import (
    FREQUENCY_OPTIONS, MedicationResponse, validate_medication, validate_medication_update
)


def _codes(exc_info):
    return {e.field: e.code for e in exc_info.value.errors}


def test_valid_candidate_is_returned_with_same_shape():
    validated = validate_medication({"medication_name": "Aspirin", "frequency": "Daily", "time_to_take": "08:00"})
    assert validated.medication_name == "Aspirin"
    assert validated.frequency is Frequency.DAILY
    assert validated.time_to_take == "08:00"
    assert validated.to_remote_payload() == {
        "medication_name": "Aspirin", "frequency": "Daily", "time_to_take": "08:00",
    }


@pytest.mark.parametrize("name", ["", "A"])
def test_short_name_fails_with_too_short(name):
    with pytest.raises(FormValidationError) as exc_info:
        validate_medication({"medication_name": name, "frequency": "Daily", "time_to_take": "08:00"})
    assert _codes(exc_info) == {"medication_name": "TooShort"}
    assert exc_info.value.field_messages()["medication_name"] == "Medication name must be at least 2 characters"


@pytest.mark.parametrize("frequency", ["Hourly", "daily", "", None, 3])
def test_frequency_outside_enumeration_fails(frequency):
    with pytest.raises(FormValidationError) as exc_info:
        validate_medication({"medication_name": "Aspirin", "frequency": frequency, "time_to_take": "08:00"})
    assert _codes(exc_info) == {"frequency": "InvalidEnum"}


def test_every_frequency_option_is_accepted():
    for option in FREQUENCY_OPTIONS:
        validated = validate_medication({"medication_name": "Aspirin", "frequency": option, "time_to_take": "08:00"})
        assert validated.frequency.value == option
    assert FREQUENCY_OPTIONS == ["Daily", "Twice Daily", "Three Times Daily", "Weekly", "As Needed"]


@pytest.mark.parametrize("time_to_take", ["", "   "])
def test_empty_time_fails_with_required(time_to_take):
    with pytest.raises(FormValidationError) as exc_info:
        validate_medication({"medication_name": "Aspirin", "frequency": "Daily", "time_to_take": time_to_take})
    assert _codes(exc_info) == {"time_to_take": "Required"}


def test_all_failures_are_reported_together():
    with pytest.raises(FormValidationError) as exc_info:
        validate_medication({"medication_name": "A", "frequency": "Hourly", "time_to_take": ""})
    assert _codes(exc_info) == {
        "medication_name": "TooShort",
        "frequency": "InvalidEnum",
        "time_to_take": "Required",
    }


def test_missing_fields_report_required_or_invalid_enum():
    with pytest.raises(FormValidationError) as exc_info:
        validate_medication({})
    assert _codes(exc_info) == {
        "medication_name": "Required",
        "frequency": "InvalidEnum",
        "time_to_take": "Required",
    }


def test_non_text_name_is_invalid():
    with pytest.raises(FormValidationError) as exc_info:
        validate_medication({"medication_name": 42, "frequency": "Daily", "time_to_take": "08:00"})
    assert _codes(exc_info) == {"medication_name": "Invalid"}


def test_user_id_is_not_part_of_the_payload():
    validated = validate_medication({
        "medication_name": "Aspirin", "frequency": "Daily", "time_to_take": "08:00", "user_id": "someone-else",
    })
    assert "user_id" not in validated.to_remote_payload()


def test_partial_update_only_carries_provided_fields():
    updates = validate_medication_update({"frequency": "Weekly"})
    assert updates.to_remote_payload() == {"frequency": "Weekly"}


def test_partial_update_applies_the_same_rules():
    with pytest.raises(FormValidationError) as exc_info:
        validate_medication_update({"medication_name": "A", "time_to_take": ""})
    assert _codes(exc_info) == {"medication_name": "TooShort", "time_to_take": "Required"}


def test_empty_update_is_rejected():
    with pytest.raises(FormValidationError) as exc_info:
        validate_medication_update({})
    assert _codes(exc_info) == {"__root__": "Required"}


def test_response_contract_rejects_unknown_frequency():
    with pytest.raises(Exception):
        MedicationResponse.model_validate({
            "id": "1", "user_id": "u", "medication_name": "Aspirin", "frequency": "Hourly",
            "time_to_take": "08:00", "created_at": "2024-01-01T00:00:00Z",
        })
