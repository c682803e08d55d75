from fastapi import APIRouter

from app.schemas.sche_base import DataResponse

router = APIRouter()


@router.get("", response_model=DataResponse[dict])
async def get():
    return DataResponse().success_response(data={"status": "OK"})
