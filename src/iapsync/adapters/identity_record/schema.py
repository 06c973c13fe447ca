"""Pydantic model for subscriber identities exchanged with other devices."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SubscriberIdentityRecord(BaseModel):
    """Portable form of a subscriber identity (storage sync or backup).

    Exactly one of ``original_transaction_id`` and ``purchase_token`` is set.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    subscriber_id: str = Field(alias="subscriberId", min_length=1)
    original_transaction_id: int | None = Field(
        default=None, alias="originalTransactionId", ge=0, lt=2**64
    )
    purchase_token: str | None = Field(default=None, alias="purchaseToken", min_length=1)

    @model_validator(mode="after")
    def _exactly_one_reference(self) -> SubscriberIdentityRecord:
        has_transaction = self.original_transaction_id is not None
        has_token = self.purchase_token is not None
        if has_transaction == has_token:
            raise ValueError(
                "Exactly one of originalTransactionId and purchaseToken must be set"
            )
        return self
