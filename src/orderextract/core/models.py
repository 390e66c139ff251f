"""Pydantic models for extracted purchase orders and the reference catalog."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Values are kept exactly as the extraction source emits them
Scalar = int | float | str | None


def flatten_nested(value: Any) -> Any:
    """Render an object or list found where a single value belongs as JSON text."""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return value


def keep_objects(value: Any) -> list[Any]:
    """List of the JSON objects in ``value``; anything else is dropped."""
    if isinstance(value, dict):
        return [value]
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, (dict, BaseModel))]


class MatchTier(str, Enum):
    """Strategy that produced a reference match."""

    EXACT_REF = "exact_ref"
    REF_IN_DESCRIPTION = "ref_in_description"
    DESCRIPTION_OVERLAP = "description_overlap"


class DocumentStatus(str, Enum):
    """Processing state of a submitted document."""

    WAITING = "waiting"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


class _SourceModel(BaseModel):
    """Base for models parsed from extraction-source JSON."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class OrderHeader(_SourceModel):
    """Header fields of a purchase order."""

    client: str | None = Field(default=None, alias="cliente")
    order_number: str | None = Field(default=None, alias="num_encomenda")
    order_date: str | None = Field(default=None, alias="data_encomenda")
    commitment: str | None = Field(default=None, alias="compromisso")
    budget_line: str | None = Field(default=None, alias="cabimento")
    contract_number: str | None = Field(default=None, alias="num_contrato")
    client_tax_id: str | None = Field(default=None, alias="nif_cliente")
    delivery_address: str | None = Field(default=None, alias="morada_entrega")

    @field_validator("*", mode="before")
    @classmethod
    def stringify_values(cls, value: Any) -> Any:
        """Order numbers and tax IDs often come back as JSON numbers."""
        value = flatten_nested(value)
        if isinstance(value, (int, float)):
            return str(value)
        return value


class Delivery(_SourceModel):
    """A partial-shipment commitment for one line item."""

    date: str | None = Field(default=None, alias="data")
    quantity: Scalar = Field(default=None, alias="quantidade")

    @field_validator("date", mode="before")
    @classmethod
    def stringify_date(cls, value: Any) -> Any:
        value = flatten_nested(value)
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("quantity", mode="before")
    @classmethod
    def flatten_quantity(cls, value: Any) -> Any:
        return flatten_nested(value)


class LineItem(_SourceModel):
    """One ordered article within a purchase order."""

    item_code: Scalar = Field(default=None, alias="cod_artigo")
    supplier_ref: Scalar = Field(default=None, alias="ref_cliente")
    description: Scalar = Field(default=None, alias="designacao")
    total_quantity: Scalar = Field(default=None, alias="quantidade_total")
    unit: Scalar = Field(default=None, alias="unidade")
    unit_price: Scalar = Field(default=None, alias="preco_unitario")
    vat_rate: Scalar = Field(default=None, alias="iva")
    total_excl_vat: Scalar = Field(default=None, alias="total_sem_iva")
    total_incl_vat: Scalar = Field(default=None, alias="total_com_iva")
    deliveries: list[Delivery] = Field(default_factory=list, alias="entregas")

    @field_validator(
        "item_code",
        "supplier_ref",
        "description",
        "total_quantity",
        "unit",
        "unit_price",
        "vat_rate",
        "total_excl_vat",
        "total_incl_vat",
        mode="before",
    )
    @classmethod
    def flatten_values(cls, value: Any) -> Any:
        """A nested value such as {"taxa": 23} is kept as its JSON text."""
        return flatten_nested(value)

    @field_validator("deliveries", mode="before")
    @classmethod
    def default_deliveries(cls, value: Any) -> Any:
        """Null or malformed entries are dropped; the rest of the line survives."""
        return keep_objects(value)


class Extraction(_SourceModel):
    """
    Structured data read from one purchase-order document.

    Keyed by ``document_id``; processing the same document again produces a
    new Extraction that replaces the previous one.
    """

    document_id: str
    source_file: str | None = None
    header: OrderHeader = Field(default_factory=OrderHeader)
    lines: list[LineItem] = Field(default_factory=list, alias="linhas")

    @field_validator("lines", mode="before")
    @classmethod
    def default_lines(cls, value: Any) -> Any:
        """Treat a null line list as empty and skip null lines."""
        if value is None:
            return []
        if isinstance(value, list):
            return keep_objects(value)
        return value

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any],
        document_id: str,
        source_file: str | None = None,
    ) -> "Extraction":
        """
        Build an Extraction from extraction-source JSON.

        The source returns header keys at the top level next to ``linhas``;
        a nested ``header`` object is accepted as well.

        Args:
            payload: Decoded JSON object
            document_id: Identifier of the submitted document
            source_file: Original filename

        Returns:
            Extraction with missing optional fields defaulted
        """
        header = payload.get("header")
        if not isinstance(header, dict):
            header = {key: value for key, value in payload.items() if key not in ("linhas", "lines")}

        lines = payload.get("linhas", payload.get("lines"))

        return cls(
            document_id=document_id,
            source_file=source_file,
            header=OrderHeader.model_validate(header),
            lines=lines,
        )


class CatalogEntry(_SourceModel):
    """One internal reference code and its catalog description."""

    internal_code: str
    description: str


@dataclass(frozen=True)
class MatchResult:
    """Best catalog entry found for a line item."""

    entry: CatalogEntry
    score: float
    tier: MatchTier

    @property
    def internal_code(self) -> str:
        return self.entry.internal_code
