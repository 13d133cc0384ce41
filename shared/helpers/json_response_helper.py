from typing import Any

from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult


def success_response(data: Any = None, message: str = "Success",
                     status_code: str = AppStatusCode.OPERATION_SUCCESSFUL):
    return JsonOutResult(
        data=data,
        status="Success",
        status_code=status_code,
        message=message
    )
