"""Pydantic schemas for the document creation payload.

Field names and nesting follow the registration API's wire format exactly.
Two wire names are camelCase (``participantInn`` and ``importRequest``);
they are exposed as snake_case attributes and serialized back through
aliases. Models are frozen: a document is built once and passed around.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Description(BaseModel):
    """Document description block."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    participant_inn: str = Field(
        ...,
        alias="participantInn",
        description="Taxpayer id (INN) of the participant.",
    )


class Product(BaseModel):
    """A single product line of the document."""

    model_config = ConfigDict(frozen=True)

    certificate_document: str | None = Field(
        default=None, description="Conformity certificate type."
    )
    certificate_document_date: str | None = Field(
        default=None, description="Certificate date (YYYY-MM-DD)."
    )
    certificate_document_number: str | None = Field(
        default=None, description="Certificate number."
    )
    owner_inn: str = Field(..., description="Owner INN.")
    producer_inn: str = Field(..., description="Producer INN.")
    production_date: str = Field(..., description="Production date (YYYY-MM-DD).")
    tnved_code: str = Field(..., description="Commodity nomenclature (TN VED) code.")
    uit_code: str | None = Field(default=None, description="Unique identification code.")
    uitu_code: str | None = Field(
        default=None, description="Unique identification code of a package unit."
    )


class Document(BaseModel):
    """Document submitted to the creation endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    description: Description
    doc_id: str
    doc_status: str
    doc_type: str
    import_request: bool = Field(default=False, alias="importRequest")
    owner_inn: str
    participant_inn: str
    producer_inn: str
    production_date: str
    production_type: str
    products: tuple[Product, ...] = Field(default_factory=tuple)
    reg_date: str
    reg_number: str | None = None

    def __str__(self) -> str:
        return f"Document(doc_id={self.doc_id!r})"
