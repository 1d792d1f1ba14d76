"""
Pydantic schemas for operation arguments and API requests
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class OperationArgs(BaseModel):
    """Base for operation argument models; unknown keys are rejected"""
    model_config = ConfigDict(extra="forbid")


class NoArgs(OperationArgs):
    pass


class InitializeArgs(OperationArgs):
    owner_id: str = Field(..., min_length=1, description="Account receiving the initial supply")
    total_supply: str = Field(..., description="Initial supply as a decimal string")


class AccountArgs(OperationArgs):
    account_id: str = Field(..., min_length=1)


class StorageDepositArgs(OperationArgs):
    account_id: Optional[str] = Field(None, description="Account to register, defaults to the caller")
    register_only: Optional[bool] = None


class TransferArgs(OperationArgs):
    receiver_id: str = Field(..., min_length=1)
    amount: str = Field(..., description="Amount as a decimal string")
    memo: Optional[str] = None


# API request bodies
class InvokeRequest(BaseModel):
    args: Dict[str, Any] = Field(default_factory=dict)
