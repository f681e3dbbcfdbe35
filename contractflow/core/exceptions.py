# =====================================================
# FILE: contractflow/core/exceptions.py
# Domain Exceptions and HTTP Mapping
# =====================================================

from typing import NoReturn
import logging

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class ContractFlowError(Exception):
    """Base class for all application errors"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ContractFlowError):
    """Input rejected before any write (empty name, missing selection, ...)"""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ContractFlowError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidTransitionError(ContractFlowError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class ContractLockedError(ContractFlowError):
    """Field values of a locked or revoked contract are read-only"""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, contract_id: str, contract_status: str):
        super().__init__(f"Contract {contract_id} is {contract_status} and cannot be edited")
        self.contract_id = contract_id
        self.contract_status = contract_status


class StoreError(ContractFlowError):
    """The data store failed; the operation was rolled back and abandoned"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def raise_http_error(error: Exception, action: str) -> NoReturn:
    """
    Translate a service error into an HTTPException for the router layer
    """
    if isinstance(error, HTTPException):
        raise error
    if isinstance(error, ContractFlowError):
        if isinstance(error, StoreError):
            logger.error(f"Error {action}: {error.message}")
        else:
            logger.warning(f"Rejected {action}: {error.message}")
        raise HTTPException(status_code=error.status_code, detail=error.message)

    logger.error(f"Unexpected error {action}: {str(error)}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Unexpected error {action}",
    )
