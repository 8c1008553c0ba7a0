from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use camelCase keys but accept snake_case too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AccountCreate(CamelModel):
    balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=19,
        decimal_places=2,
        description="Opening balance",
    )

class AccountResponse(CamelModel):
    id: int
    balance: Decimal = Field(..., ge=0)
    created_at: datetime

class WithdrawalRequest(CamelModel):
    account_id: int = Field(..., gt=0, description="Account to withdraw from")
    amount: Decimal = Field(
        ..., gt=0, max_digits=19, decimal_places=2, description="Amount to withdraw"
    )

class WithdrawalResponse(CamelModel):
    request_id: str
    balance: Decimal

class ErrorResponse(CamelModel):
    request_id: str
    detail: str

class HealthResponse(CamelModel):
    status: str
    pending_events: int


class WithdrawalEvent(CamelModel):
    """Payload stored in the outbox and published for each withdrawal."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    request_id: str
    account_id: int
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
