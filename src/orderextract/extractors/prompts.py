"""Extraction prompt for the LLM."""

EXTRACTION_PROMPT = '''Analisa este documento de nota de encomenda e extrai os dados.
Devolve APENAS JSON válido, sem texto adicional, sem markdown.

IMPORTANTE sobre entregas programadas: alguns artigos têm múltiplas datas de entrega parciais
(ex: "entregar 2000 em 2026-01-29 / entregar 1000 em 2026-02-03").
Quando existirem, inclui-as no array "entregas". Se não houver entregas programadas, o array fica vazio.

Formato JSON:
{
  "cliente": "nome do cliente/entidade emissora",
  "num_encomenda": "número da nota de encomenda",
  "data_encomenda": "data da encomenda",
  "compromisso": "número de compromisso se existir, senão null",
  "cabimento": "número de cabimento se existir, senão null",
  "num_contrato": "número de procedimento/contrato/concurso se existir, senão null",
  "nif_cliente": "NIF/número de contribuinte do cliente/entidade emissora se existir, senão null",
  "morada_entrega": "morada/local de entrega indicado no documento se existir, senão null",
  "linhas": [
    {
      "cod_artigo": "código do artigo do cliente",
      "ref_cliente": "referência do fornecedor/cliente se existir (Refª: ...), senão null",
      "designacao": "descrição completa do artigo",
      "quantidade_total": "quantidade total da linha",
      "unidade": "unidade",
      "preco_unitario": "preço unitário sem IVA",
      "iva": "taxa IVA em %",
      "total_sem_iva": "total sem IVA",
      "total_com_iva": "total com IVA se disponível",
      "entregas": [
        { "data": "YYYY-MM-DD", "quantidade": "quantidade desta entrega" }
      ]
    }
  ]
}

Se um campo não existir usa null.'''

SYSTEM_PROMPT = "You are a purchase order parsing assistant. Return only valid JSON."


def get_extraction_prompt() -> str:
    """Prompt sent alongside every document."""
    return EXTRACTION_PROMPT
