import logging
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError

from app.helpers.enums import ResourceKind
from app.helpers.exception_handler import (
    CustomException, UnauthenticatedError, RemoteQueryError, RemoteWriteError
)
from app.helpers.mutation import Mutation
from app.helpers.query_cache import QueryCache, QueryKey
from app.repository.repo_medication import MedicationRepository
from app.repository.repo_remote_store import NO_ROWS, RemoteResponse
from app.schemas.sche_medication import (
    MedicationCreateRequest, MedicationUpdateRequest, MedicationResponse,
    validate_medication, validate_medication_update
)
from app.schemas.sche_token import CurrentUser
from app.services.srv_notification import NotificationService

logger = logging.getLogger(__name__)


class MedicationService:
    """
    Medication list query and add/update/delete mutations for the current user.

    Successful writes invalidate the user's cached list and raise one success
    toast; failed operations raise one error toast, are logged and leave the
    cache untouched. Without a current user nothing reaches the store.
    """

    def __init__(
        self,
        medication_repo: MedicationRepository,
        query_cache: QueryCache,
        notification_service: NotificationService,
        current_user: Optional[CurrentUser],
    ):
        self.medication_repo = medication_repo
        self.query_cache = query_cache
        self.notification_service = notification_service
        self.current_user = current_user

        self.add_medication = Mutation(
            self._add_medication,
            on_success=lambda _: self._write_succeeded('Medication added successfully!'),
            on_error=lambda e: self._write_failed(e, 'adding', 'Failed to add medication. Please try again.'),
            name='add_medication',
        )
        self.update_medication = Mutation(
            self._update_medication,
            on_success=lambda _: self._write_succeeded('Medication updated successfully!'),
            on_error=lambda e: self._write_failed(e, 'updating', 'Failed to update medication. Please try again.'),
            name='update_medication',
        )
        self.delete_medication = Mutation(
            self._delete_medication,
            on_success=lambda _: self._write_succeeded('Medication deleted successfully!'),
            on_error=lambda e: self._write_failed(e, 'deleting', 'Failed to delete medication. Please try again.'),
            name='delete_medication',
        )

    @property
    def query_key(self) -> QueryKey:
        return ResourceKind.MEDICATIONS.value, self.current_user.id if self.current_user else None

    @property
    def medications(self) -> List[MedicationResponse]:
        """Last list fetched for the current user, kept across failed refetches."""
        return self.query_cache.get(self.query_key) or []

    @property
    def medications_loading(self) -> bool:
        state = self.query_cache.get_state(self.query_key)
        return bool(state and state.is_fetching)

    @property
    def medications_error(self) -> Optional[Exception]:
        state = self.query_cache.get_state(self.query_key)
        return state.error if state else None

    def _require_user(self) -> CurrentUser:
        if self.current_user is None or not self.current_user.id:
            raise UnauthenticatedError()
        return self.current_user

    async def list_medications(self) -> List[MedicationResponse]:
        """
        Return the current user's medications, newest first.

        Raises:
            UnauthenticatedError: no current user; the store is not called.
            RemoteQueryError: the store failed or returned an unexpected payload.
        """
        try:
            user = self._require_user()
            return await self.query_cache.fetch_query(self.query_key, lambda: self._fetch_medications(user.id))
        except CustomException as e:
            logger.error(f"Error fetching medications: {e.message}")
            self.notification_service.error('Failed to load medications. Please try again.')
            raise

    async def _fetch_medications(self, user_id: str) -> List[MedicationResponse]:
        response = await self.medication_repo.get_by_user_id(user_id)
        if response.error:
            raise RemoteQueryError(response.error.message, remote_code=response.error.code)
        if not isinstance(response.data, list):
            raise RemoteQueryError('Unexpected medication list payload')
        return [self._to_record(row, RemoteQueryError) for row in response.data]

    async def _add_medication(
        self, medication_data: Union[MedicationCreateRequest, Mapping[str, Any]]
    ) -> MedicationResponse:
        user = self._require_user()
        if not isinstance(medication_data, MedicationCreateRequest):
            medication_data = validate_medication(medication_data)
        response = await self.medication_repo.create(user.id, medication_data.to_remote_payload())
        self._raise_write_error(response)
        return self._to_record(response.data, RemoteWriteError)

    async def _update_medication(
        self, medication_id: str, updates: Union[MedicationUpdateRequest, Mapping[str, Any]]
    ) -> MedicationResponse:
        user = self._require_user()
        if not isinstance(updates, MedicationUpdateRequest):
            updates = validate_medication_update(updates)
        response = await self.medication_repo.update(medication_id, user.id, updates.to_remote_payload())
        self._raise_write_error(response)
        return self._to_record(response.data, RemoteWriteError)

    async def _delete_medication(self, medication_id: str) -> None:
        user = self._require_user()
        response = await self.medication_repo.delete(medication_id, user.id)
        self._raise_write_error(response)
        if not response.count:
            raise RemoteWriteError('Medication not found', remote_code=NO_ROWS, http_code=404)

    @staticmethod
    def _raise_write_error(response: RemoteResponse) -> None:
        if response.error is None:
            return
        if response.error.code == NO_ROWS:
            raise RemoteWriteError('Medication not found', remote_code=NO_ROWS, http_code=404)
        raise RemoteWriteError(response.error.message, remote_code=response.error.code)

    @staticmethod
    def _to_record(payload: Any, error_cls) -> MedicationResponse:
        try:
            return MedicationResponse.model_validate(payload)
        except ValidationError as e:
            raise error_cls(f"Unexpected medication payload: {e.error_count()} invalid field(s)")

    def _write_succeeded(self, description: str) -> None:
        self.query_cache.invalidate(self.query_key)
        self.notification_service.success(description)

    def _write_failed(self, error: CustomException, action: str, description: str) -> None:
        logger.error(f"Error {action} medication: {error.message}")
        self.notification_service.error(description)
