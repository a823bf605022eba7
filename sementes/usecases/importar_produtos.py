# sementes/usecases/importar_produtos.py
"""
UC: Importação de lotes a partir de planilha XLSX.
- run_importar_produtos(path): cadastra cada linha válida como produto
  AGUARDANDO_LOCACAO; linhas inválidas são relatadas e não interrompem as
  demais.

Obs.:
- Cada produto é cadastrado na sua própria transação.
- O código de localização da planilha (quando houver) volta no resultado
  como sugestão para o operador; a importação não ocupa localizações.
"""

from __future__ import annotations

from typing import Any, Dict, List

from sementes.adapters.xlsx_loader import load_produtos_from_xlsx
from sementes.config import DB_PATH
from sementes.domain.errors import BusinessRuleError
from sementes.domain.fsm import Evento, autorizar
from sementes.domain.models import Ator, StatusProduto
from sementes.infra.logger import (
    log_file_operation, log_system_event, log_transaction, print_system,
)
from sementes.usecases.movimentar_produto import run_cadastrar_produto


def run_importar_produtos(path: str, ator: Ator, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Lê o XLSX e cadastra os produtos.

    Returns:
        ``{"arquivo", "linhas", "criados": [...], "erros": [...]}`` onde cada
        criado traz ``linha``, ``produto`` e ``localizacao`` sugerida, e cada
        erro traz ``linha`` e ``mensagens``.
    """
    log_system_event("importar_produtos_start", {"file_path": path})
    log_file_operation("import", path)
    try:
        autorizar(ator, Evento.CADASTRAR)
        rows = load_produtos_from_xlsx(path)
        log_file_operation("import", path, rows_processed=len(rows))

        criados: List[Dict[str, Any]] = []
        erros: List[Dict[str, Any]] = []
        for row in rows:
            if row["erros"]:
                erros.append({"linha": row["linha"], "mensagens": row["erros"]})
                continue
            try:
                res = run_cadastrar_produto(
                    nome=row["nome"],
                    lote=row["lote"],
                    quantidade=row["quantidade"],
                    peso_unitario_kg=row["peso_unitario_kg"],
                    ator=ator,
                    status_inicial=StatusProduto.AGUARDANDO_LOCACAO,
                    tipo_semente_id=row["tipo_semente_id"],
                    cliente_id=row["cliente_id"],
                    tipo_armazenamento=row["tipo_armazenamento"],
                    data_validade=row["data_validade"],
                    observacoes=row["observacoes"],
                    db_path=db_path,
                )
            except BusinessRuleError as e:
                erros.append({"linha": row["linha"], "mensagens": [e.message]})
                continue
            criados.append({"linha": row["linha"], "produto": res["produto"], "localizacao": row["localizacao"]})

        result = {"arquivo": path, "linhas": len(rows), "criados": criados, "erros": erros}
        print_system(f">> {len(criados)} produto(s) importado(s), {len(erros)} linha(s) com erro.")
        log_transaction("importar_produtos", {"file": path, "rows_count": len(rows)},
                        result={"criados": len(criados), "erros": len(erros)})
        return result
    except Exception as e:
        log_transaction("importar_produtos", {"file": path}, error=str(e))
        log_system_event("importar_produtos_error", {"file_path": path, "error": str(e)}, level="error")
        raise
