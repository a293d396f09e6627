"""
API request and response models.

Pydantic models shared by the JSON and gRPC adapters, so both validate
and encode requests identically. Timestamps travel as integer seconds
since the Unix epoch; null means the subscriber has not confirmed.
"""

from pydantic import BaseModel, EmailStr, Field

from src.domain.entry import EmailEntry, from_unix_seconds, to_unix_seconds


class EmailEntryModel(BaseModel):
    """
    Wire form of a subscriber record.

    The address is not re-validated on the way out: records are encoded
    as the Store returns them, whatever client wrote them.
    """

    id: int | None = Field(default=None, description="Store-assigned identifier (ignored on update)")
    email: str
    confirmed_at: int | None = Field(
        default=None, description="Confirmation time in seconds since the Unix epoch, null if unconfirmed"
    )
    opt_out: bool = False

    @classmethod
    def from_entry(cls, entry: EmailEntry) -> "EmailEntryModel":
        return cls(
            id=entry.id,
            email=entry.email,
            confirmed_at=to_unix_seconds(entry.confirmed_at),
            opt_out=entry.opt_out,
        )

    def to_entry(self) -> EmailEntry:
        """
        Convert to the canonical record.

        Raises:
            InvalidRequest: If confirmed_at is outside the representable range
        """
        return EmailEntry(
            id=self.id,
            email=self.email,
            confirmed_at=from_unix_seconds(self.confirmed_at),
            opt_out=self.opt_out,
        )


class EmailEntryInput(EmailEntryModel):
    """Subscriber record supplied by a client; the address must be valid."""

    email: EmailStr


class EmailRequest(BaseModel):
    """Request model for GetEmail, CreateEmail and DeleteEmail."""

    email: EmailStr


class GetEmailBatchRequest(BaseModel):
    """Request model for GetEmailBatch."""

    page: int = Field(..., description="Zero-based page index")
    count: int = Field(..., description="Page size")


class UpdateEmailRequest(BaseModel):
    """Request model for UpdateEmail - a full replacement record."""

    email_entry: EmailEntryInput


class EmailResponse(BaseModel):
    """Response model for single-record operations; email_entry is null when absent."""

    email_entry: EmailEntryModel | None = None

    @classmethod
    def from_entry(cls, entry: EmailEntry | None) -> "EmailResponse":
        if entry is None:
            return cls()
        return cls(email_entry=EmailEntryModel.from_entry(entry))


class GetEmailBatchResponse(BaseModel):
    """Response model for GetEmailBatch."""

    email_entries: list[EmailEntryModel]

    @classmethod
    def from_entries(cls, entries: list[EmailEntry]) -> "GetEmailBatchResponse":
        return cls(email_entries=[EmailEntryModel.from_entry(entry) for entry in entries])


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
