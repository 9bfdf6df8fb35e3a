"""Section headings and instructions used in the assembled context."""

TRAINING_HEADER = "## EXEMPLOS DE TREINAMENTO (ADAPTE conforme a pergunta)"
TRAINING_FOOTER = "Mantenha a MEDIDA do exemplo. Adapte FILTRO e AGRUPADOR conforme a pergunta."

HISTORY_HEADER = "## QUERIES QUE FUNCIONARAM"
HISTORY_FOOTER = "Adapte estas queries para a pergunta atual."

SUGGESTED_MEASURES_LINE = "Medidas recomendadas: {measures}"

DOCUMENTATION_HEADER = "# CONTEXTO DO MODELO DE DADOS"
MEASURES_HEADER = "## MEDIDAS DISPONÍVEIS ({shown} de {total} total)"
QUERIES_HEADER = "## QUERIES PRÉ-CONFIGURADAS ({shown} de {total} total)"
EXAMPLES_HEADER = "## EXEMPLOS DE PERGUNTAS E RESPOSTAS ({shown} de {total} total)"
COLUMNS_HEADER = "## COLUNAS PRINCIPAIS"
