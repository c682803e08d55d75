from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Request
import logging

from app.helpers.exception_handler import CustomException
from app.helpers.login_manager import get_current_user
from app.helpers.query_cache import QueryCache
from app.repository.repo_medication import MedicationRepository
from app.repository.repo_remote_store import RemoteStore
from app.schemas.sche_base import DataResponse
from app.schemas.sche_medication import MedicationCreateRequest, MedicationUpdateRequest, MedicationResponse
from app.schemas.sche_token import CurrentUser
from app.services.srv_medication import MedicationService
from app.services.srv_notification import NotificationService

router = APIRouter()

logger = logging.getLogger(__name__)


def get_remote_store(request: Request) -> RemoteStore:
    return request.app.state.remote_store


def get_query_cache(request: Request) -> QueryCache:
    return request.app.state.query_cache


def get_medication_service(
    store: RemoteStore = Depends(get_remote_store),
    query_cache: QueryCache = Depends(get_query_cache),
    current_user: Optional[CurrentUser] = Depends(get_current_user),
) -> MedicationService:
    return MedicationService(
        medication_repo=MedicationRepository(store),
        query_cache=query_cache,
        notification_service=NotificationService(),
        current_user=current_user,
    )


@router.get('', response_model=DataResponse[List[MedicationResponse]])
async def get_medications(
    medication_service: MedicationService = Depends(get_medication_service)
) -> Any:
    """
    Retrieve the current user's medications.

    **Authorization**: Bearer token required.

    **Process**:
    1. Serve the cached list when it is still fresh
    2. Otherwise query the medication table filtered by the current user
    3. Order by creation time, newest first

    **Response**: List of medication records.
    """
    logger.info("get_medications request")
    try:
        medications = await medication_service.list_medications()
    except CustomException as e:
        e.notifications = medication_service.notification_service.messages
        raise
    logger.info(f"get_medications success: {len(medications)} medications retrieved")
    return DataResponse().success_response(
        data=medications, notifications=medication_service.notification_service.messages
    )


@router.post('', response_model=DataResponse[MedicationResponse], status_code=201)
async def create_medication(
    medication_data: MedicationCreateRequest,
    medication_service: MedicationService = Depends(get_medication_service)
) -> Any:
    """
    Add a medication for the current user.

    **Authorization**: Bearer token required.

    **Process**:
    1. Validate name (at least 2 characters), frequency and time to take
    2. Insert the record with the current user as owner
    3. Invalidate the user's cached medication list

    **Response**: The created medication, including its id and timestamps.
    """
    logger.info(f"create_medication request: {medication_data.medication_name}")
    try:
        medication = await medication_service.add_medication.mutate_async(medication_data)
    except CustomException as e:
        e.notifications = medication_service.notification_service.messages
        raise
    logger.info(f"create_medication success: id={medication.id}")
    return DataResponse().success_response(
        data=medication, notifications=medication_service.notification_service.messages
    )


@router.patch('/{medication_id}', response_model=DataResponse[MedicationResponse])
async def update_medication(
    medication_id: str,
    updates: MedicationUpdateRequest,
    medication_service: MedicationService = Depends(get_medication_service)
) -> Any:
    """
    Update fields of one of the current user's medications.

    Only a record owned by the current user can match; any other id is
    reported as not found.
    """
    logger.info(f"update_medication request: id={medication_id}")
    try:
        medication = await medication_service.update_medication.mutate_async(medication_id, updates)
    except CustomException as e:
        e.notifications = medication_service.notification_service.messages
        raise
    logger.info(f"update_medication success: id={medication_id}")
    return DataResponse().success_response(
        data=medication, notifications=medication_service.notification_service.messages
    )


@router.delete('/{medication_id}', response_model=DataResponse[bool])
async def delete_medication(
    medication_id: str,
    medication_service: MedicationService = Depends(get_medication_service)
) -> Any:
    """
    Permanently delete one of the current user's medications.
    """
    logger.info(f"delete_medication request: id={medication_id}")
    try:
        await medication_service.delete_medication.mutate_async(medication_id)
    except CustomException as e:
        e.notifications = medication_service.notification_service.messages
        raise
    logger.info(f"delete_medication success: id={medication_id}")
    return DataResponse().success_response(
        data=True, notifications=medication_service.notification_service.messages
    )
