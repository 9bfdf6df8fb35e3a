"""
Shared fixtures: a small restaurant-chain documentation document.
"""

from __future__ import annotations

import pytest

SAMPLE_DOCUMENTATION = """
<!-- SECTION:BASE -->
Modelo de vendas de uma rede de restaurantes. Valores em reais.
<!-- END:BASE -->

<!-- SECTION:MEDIDAS -->
## Resumo

| Medida | Descrição | Quando usar | Área |
|--------|-----------|-------------|------|
| QA_Faturamento | Faturamento bruto total | Perguntas sobre faturamento ou vendas | Comercial |
| QA_TicketMedio | Valor médio por cupom | Perguntas sobre ticket médio | Comercial |

## Detalhamento

### QA_Faturamento
**Fórmula:** `SUM(Vendas[Valor])`
**Tabela origem:** Vendas
**Formato:** R$ #,##0.00
**Colunas usadas:** Vendas.Valor, Vendas.Data
<!-- END:MEDIDAS -->

<!-- SECTION:TABELAS -->
### Vendas
Tabela fato com os cupons de venda.

| Coluna | Tipo | Uso | Exemplos |
|--------|------|-----|----------|
| Vendas.Valor | Decimal | - | 10.50, 99.90 |
| Vendas.Data | Date | Filtro | 2024-01-01 |
| Filial.Nome | String | Filtro, Agrupar | Centro, Norte |
<!-- END:TABELAS -->

<!-- SECTION:QUERIES -->
## Queries Faturamento
| ID | Pergunta | Medidas | Agrupadores | Filtros |
|----|----------|---------|-------------|---------|
| Q1 | Faturamento por filial | QA_Faturamento | Filial.Nome | - |
| Q2 | Faturamento do mês | QA_Faturamento | - | Vendas.Data |

## Ticket
| Q3 | Ticket médio por filial | QA_TicketMedio | Filial.Nome | - |
<!-- END:QUERIES -->

<!-- SECTION:EXEMPLOS -->
## Exemplo 1
**Pergunta:** Qual o faturamento de ontem?
**Medidas:** [QA_Faturamento]
**Agrupadores:** -
**Filtros:** Vendas.Data
**Resposta modelo:** "O faturamento de ontem foi R$ 1.234,00"

## Exemplo 2
**Pergunta:** Qual o ticket médio por filial?
**Medidas:** QA_TicketMedio
**Agrupadores:** Filial.Nome
**Filtros:** -
**Ordenação:** Desc
**Limite:** 10
**Resposta modelo:** "A filial Centro tem o maior ticket"

## Exemplo 3
**Pergunta:** Exemplo sem medidas
<!-- END:EXEMPLOS -->
"""


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def sample_documentation() -> str:
    return SAMPLE_DOCUMENTATION
