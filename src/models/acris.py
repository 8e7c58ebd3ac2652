from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config.acris import UNKNOWN_PARTY


def _to_str(v):
    """Sources disagree on whether codes are strings or numbers."""
    if v is None:
        return None
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v)


class RawDocument(BaseModel):
    """One recorded ACRIS instrument (master record joined to its BBL)."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    master_document_id: Optional[str] = None
    document_type: Optional[str] = None
    doc_type_description: Optional[str] = None
    document_date: Optional[Union[date, datetime, str]] = None
    recorded_date: Optional[Union[date, datetime, str]] = None
    document_amount: Optional[float] = None
    class_code_description: Optional[str] = None

    borough: Optional[str] = None
    block: Optional[str] = None
    lot: Optional[str] = None

    coerce_ids = field_validator(
        "master_document_id", "document_type", "borough", "block", "lot", mode="before"
    )(_to_str)

    @property
    def has_valid_amount(self) -> bool:
        return self.document_amount is not None and self.document_amount > 0


class RawParty(BaseModel):
    """One named participant on an ACRIS document."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    party_document_id: Optional[str] = None
    party_party_type: Optional[str] = None  # role code: "1", "2", "3"
    party_name: Optional[str] = None
    party_party_type_description: Optional[str] = None
    party_address_1: Optional[str] = None
    party_address_2: Optional[str] = None
    party_city: Optional[str] = None
    party_state: Optional[str] = None
    party_zip: Optional[str] = None
    party_country: Optional[str] = None

    coerce_codes = field_validator(
        "party_document_id", "party_party_type", "party_zip", mode="before"
    )(_to_str)

    @property
    def clean_name(self) -> str:
        return (self.party_name or "").strip()


class ControlCodeEntry(BaseModel):
    """Row of the ACRIS Document Control Codes table."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    record_type: Optional[str] = Field(default=None, alias="RECORD TYPE")
    doc_type: str = Field(alias="DOC. TYPE")
    doc_type_description: Optional[str] = Field(default=None, alias="DOC. TYPE DESCRIPTION")
    class_code_description: Optional[str] = Field(default=None, alias="CLASS CODE DESCRIPTION")
    party1_type: Optional[str] = Field(default=None, alias="PARTY1 TYPE")  # e.g. "MORTGAGER/BORROWER"
    party2_type: Optional[str] = Field(default=None, alias="PARTY2 TYPE")
    party3_type: Optional[str] = Field(default=None, alias="PARTY3 TYPE")


class PartyDetail(BaseModel):
    name: str
    type: Optional[str] = None  # party_party_type_description
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_party(cls, party: RawParty) -> "PartyDetail":
        return cls(
            name=party.clean_name,
            type=party.party_party_type_description,
            address1=party.party_address_1,
            address2=party.party_address_2,
            city=party.party_city,
            state=party.party_state,
            zip=party.party_zip,
            country=party.party_country,
        )

    @property
    def address_line(self) -> str:
        return ", ".join(
            p for p in (self.address1, self.address2, self.city, self.state, self.zip) if p
        )


class Transaction(BaseModel):
    """One normalized document: who transferred what to whom, when, for how much."""
    document_id: str
    document_type: Optional[str] = None
    doc_type_description: Optional[str] = None
    document_date: Optional[Union[date, datetime, str]] = None
    document_amount: float
    class_code_description: Optional[str] = None

    from_party: List[str] = Field(default_factory=lambda: [UNKNOWN_PARTY])
    to_party: List[str] = Field(default_factory=lambda: [UNKNOWN_PARTY])
    party1_type: str
    party2_type: str

    is_deed: bool = False
    is_mortgage: bool = False
    is_ucc_lien: bool = False
    is_other_document: bool = False

    party_details: List[PartyDetail] = Field(default_factory=list)

    @property
    def categories(self) -> List[str]:
        labels = []
        if self.is_deed:
            labels.append("Deed")
        if self.is_mortgage:
            labels.append("Mortgage")
        if self.is_ucc_lien:
            labels.append("UCC Lien")
        if self.is_other_document:
            labels.append("Other")
        return labels


class TransactionsResult(BaseModel):
    data: Optional[List[Transaction]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
