"""Pytest configuration and fixtures."""

import asyncio
from typing import Any

import pytest

from orderextract.core.exceptions import ExtractionError
from orderextract.core.models import CatalogEntry, Extraction
from orderextract.extractors import BaseExtractor


class FakeExtractor(BaseExtractor):
    """Extractor returning canned payloads keyed by filename."""

    def __init__(self, responses: dict[str, Any]):
        self.responses = responses
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0

    async def extract(self, content: bytes, media_type: str, filename: str | None = None) -> dict:
        self.calls.append(filename)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0)
            response = self.responses[filename]
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.active -= 1


@pytest.fixture
def fake_extractor_cls() -> type[FakeExtractor]:
    return FakeExtractor


@pytest.fixture
def failing_response() -> ExtractionError:
    return ExtractionError("Erro API: 529")


@pytest.fixture
def sample_catalog() -> list[CatalogEntry]:
    """Small internal catalog."""
    return [
        CatalogEntry(internal_code="P-100", description="Parafuso M6 inox"),
        CatalogEntry(internal_code="PRC-2040", description="Porca sextavada M8"),
        CatalogEntry(internal_code="LV-01", description="Luvas nitrilo azul"),
        CatalogEntry(internal_code="X1", description="Fita adesiva"),
    ]


@pytest.fixture
def order_payload() -> dict[str, Any]:
    """Extraction-source JSON for one purchase order with scheduled deliveries."""
    return {
        "cliente": "ACME",
        "num_encomenda": "NE-2026/015",
        "data_encomenda": "2026-01-10",
        "compromisso": None,
        "cabimento": None,
        "num_contrato": "CP-44/2025",
        "nif_cliente": "501234567",
        "morada_entrega": None,
        "linhas": [
            {
                "cod_artigo": "A-1",
                "ref_cliente": "P-100",
                "designacao": "Parafuso M6",
                "quantidade_total": 3000,
                "unidade": "UN",
                "preco_unitario": "0.05",
                "iva": 23,
                "total_sem_iva": "150.00",
                "total_com_iva": None,
                "entregas": [
                    {"data": "2026-01-29", "quantidade": 2000},
                    {"data": "2026-02-03", "quantidade": 1000},
                ],
            },
            {
                "cod_artigo": "A-2",
                "ref_cliente": None,
                "designacao": "Luva nitrilo azul tamanho M",
                "quantidade_total": 100,
                "unidade": "CX",
                "preco_unitario": "4.10",
                "iva": 23,
                "total_sem_iva": "410.00",
                "total_com_iva": "504.30",
                "entregas": [],
            },
        ],
    }


@pytest.fixture
def order_extraction(order_payload) -> Extraction:
    return Extraction.from_payload(order_payload, document_id="doc-1", source_file="ne_015.pdf")


@pytest.fixture
def plain_extraction() -> Extraction:
    """Order with a single line and no deliveries."""
    return Extraction.from_payload(
        {
            "cliente": "Hospital Central",
            "num_encomenda": "7781",
            "linhas": [{"designacao": "Papel A4 branco 80g", "quantidade_total": "20"}],
        },
        document_id="doc-2",
        source_file="7781.png",
    )
