from typing import Any

from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult


def success_response(data: Any, message: str = "Success", status_code: str = AppStatusCode.DATA_RETRIEVED_SUCCESSFULLY):
    return JsonOutResult(
        success=True,
        data=data,
        error=None,
        status_code=status_code,
        message=message
    )


def error_result(message: str, status_code: str = AppStatusCode.OPERATION_FAILED) -> dict:
    return JsonOutResult(
        success=False,
        data=None,
        error=message,
        status_code=status_code,
    ).model_dump()
