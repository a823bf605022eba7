# sementes/usecases/movimentar_produto.py
"""
UC: Ciclo de vida do produto (máquina de estados).

Operações (todas recebem um ``Ator`` verificado):
- run_cadastrar_produto()      ADMIN     → CADASTRADO | AGUARDANDO_LOCACAO
- run_concluir_cadastro()      ADMIN     CADASTRADO → AGUARDANDO_LOCACAO
- run_localizar()              OPERATOR  AGUARDANDO_LOCACAO → LOCADO (entry)
- run_localizar_automatico()   OPERATOR  idem, escolhendo a localização
- run_mover()                  OPERATOR  LOCADO → LOCADO (transfer)
- run_mover_parcial()          OPERATOR  LOCADO → LOCADO (partial-transfer)
- run_adicionar_estoque()      ADMIN     LOCADO → LOCADO (stock-add)
- run_saida_parcial()          ADMIN     LOCADO → LOCADO | REMOVIDO (exit)
- run_saida_total()            ADMIN     LOCADO → REMOVIDO (exit)
- run_remover()                ADMIN     → REMOVIDO (exit, se havia estoque locado)

Cada operação roda numa única transação ``BEGIN IMMEDIATE``: escritas
condicionais nas localizações, alocações, produto (com checagem de versão)
e a movimentação confirmam juntas ou não confirmam.

Retorno: ``{"produto": Produto, "movimentacao": Movimentacao | None,
"localizacoes": [Localizacao, ...]}`` com as localizações afetadas.
"""

from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any, Dict, List, Optional

from sementes.config import DB_PATH, DEFAULTS
from sementes.domain.errors import (
    ConflictError,
    LocationOccupiedError,
    NotFoundError,
    ValidationError,
)
from sementes.domain.formulas import kg_para_g, peso_total_g
from sementes.domain.fsm import Evento, autorizar, transicionar
from sementes.domain.models import (
    Ator,
    Localizacao,
    Movimentacao,
    Produto,
    StatusProduto,
    TipoMovimentacao,
)
from sementes.infra.db import connect, transaction
from sementes.infra.logger import (
    log_movimentacao, log_system_event, log_transaction, print_system,
)
from sementes.infra.repositories import (
    AlocacaoRepo,
    LocalizacaoRepo,
    MovimentacaoRepo,
    ProdutoRepo,
)

TIPOS_ARMAZENAMENTO = {"saco", "bag"}


# ----------------------
# validações
# ----------------------

def validar_quantidade(valor: Any, campo: str = "quantidade") -> int:
    """Inteiro estritamente positivo (bool não conta como inteiro)."""
    if isinstance(valor, bool):
        raise ValidationError(f"{campo} deve ser um número inteiro", **{campo: valor})
    if isinstance(valor, float) and valor.is_integer():
        valor = int(valor)
    if isinstance(valor, str) and valor.strip().isdigit():
        valor = int(valor.strip())
    if not isinstance(valor, int):
        raise ValidationError(f"{campo} deve ser um número inteiro", **{campo: valor})
    if valor <= 0:
        raise ValidationError(f"{campo} deve ser maior que zero", **{campo: valor})
    if valor > DEFAULTS.quantidade_max:
        raise ValidationError(
            f"{campo} acima do máximo de {DEFAULTS.quantidade_max} unidades", **{campo: valor}
        )
    return valor


def validar_data(valor: Any, campo: str = "data_validade") -> Optional[str]:
    """Data ISO (YYYY-MM-DD) ou None; outros formatos são recusados."""
    if valor is None or (isinstance(valor, str) and not valor.strip()):
        return None
    if isinstance(valor, date):
        return valor.isoformat()
    try:
        return date.fromisoformat(str(valor).strip()).isoformat()
    except ValueError:
        raise ValidationError(f"{campo} deve estar no formato YYYY-MM-DD", **{campo: valor}) from None


def validar_peso_unitario(peso_kg: Any) -> int:
    """Converte o peso unitário (kg) para gramas, dentro da faixa aceita."""
    try:
        g = kg_para_g(peso_kg)
    except ValueError as e:
        raise ValidationError(str(e), peso_unitario_kg=peso_kg) from None
    if g < kg_para_g(DEFAULTS.peso_unitario_min_kg) or g > kg_para_g(DEFAULTS.peso_unitario_max_kg):
        raise ValidationError(
            f"Peso unitário deve estar entre {DEFAULTS.peso_unitario_min_kg} e "
            f"{DEFAULTS.peso_unitario_max_kg} kg",
            peso_unitario_kg=peso_kg,
        )
    return g


# ----------------------
# núcleo (dentro de uma transação)
# ----------------------

def _registrar(conn: sqlite3.Connection, produto: Produto, tipo: TipoMovimentacao, ator: Ator,
               quantidade: int, motivo: str, origem_id: Optional[int] = None,
               destino_id: Optional[int] = None) -> Movimentacao:
    return MovimentacaoRepo(conn).append(
        Movimentacao(
            tipo=tipo,
            produto_id=produto.id,
            ator_id=ator.id,
            quantidade=quantidade,
            peso_g=peso_total_g(quantidade, produto.peso_unitario_g),
            motivo=motivo,
            status_resultante=produto.status,
            origem_id=origem_id,
            destino_id=destino_id,
        )
    )


def _liberar_tudo(conn: sqlite3.Connection, produto: Produto) -> List[Localizacao]:
    locs = LocalizacaoRepo(conn)
    alocs = AlocacaoRepo(conn)
    liberadas = [locs.release_if_occupant(a.localizacao_id, produto.id) for a in alocs.listar_por_produto(produto.id)]
    alocs.remover_por_produto(produto.id)
    return liberadas


def _nova_principal(conn: sqlite3.Connection, produto: Produto) -> None:
    """Se a principal esgotou, a alocação mais antiga restante assume."""
    restantes = AlocacaoRepo(conn).listar_por_produto(produto.id)
    if not any(a.localizacao_id == produto.localizacao_id for a in restantes):
        produto.localizacao_id = restantes[0].localizacao_id if restantes else None


def _retirar_estoque(conn: sqlite3.Connection, produto: Produto, quantidade: int) -> List[Localizacao]:
    """Consome ``quantidade`` da principal e depois das demais, em ordem de criação."""
    locs = LocalizacaoRepo(conn)
    alocs = AlocacaoRepo(conn)
    todas = alocs.listar_por_produto(produto.id)
    ordem = [a for a in todas if a.localizacao_id == produto.localizacao_id]
    ordem += [a for a in todas if a.localizacao_id != produto.localizacao_id]

    afetadas: List[Localizacao] = []
    restante = quantidade
    for aloc in ordem:
        if restante <= 0:
            break
        tirar = min(aloc.quantidade, restante)
        if tirar == aloc.quantidade:
            afetadas.append(locs.release_if_occupant(aloc.localizacao_id, produto.id))
        else:
            afetadas.append(
                locs.adjust_weight_if_within_capacity(
                    aloc.localizacao_id, produto.id, -peso_total_g(tirar, produto.peso_unitario_g)
                )
            )
        alocs.definir_quantidade(aloc.id, aloc.quantidade - tirar)
        restante -= tirar
    if restante > 0:
        raise ConflictError(
            f"Alocações do produto {produto.id} não cobrem a quantidade {quantidade}",
            produto_id=produto.id,
        )
    return afetadas


def saida_em_transacao(conn: sqlite3.Connection, produto: Produto, quantidade: int, ator: Ator,
                       motivo: str, evento_parcial: Evento, evento_total: Evento) -> Dict[str, Any]:
    """
    Saída de ``quantidade`` unidades de um produto já carregado em ``conn``.

    Esgotando o estoque, libera todas as localizações e aplica
    ``evento_total``; caso contrário aplica ``evento_parcial``. Usado pela
    saída direta e pela confirmação de retirada.
    """
    # parcial e total partem do mesmo status
    transicionar(produto.status, evento_total)
    if quantidade > produto.quantidade:
        raise ValidationError(
            f"Quantidade solicitada ({quantidade}) excede a disponível ({produto.quantidade})",
            quantidade=quantidade,
            disponivel=produto.quantidade,
        )
    total = quantidade == produto.quantidade
    novo = transicionar(produto.status, evento_total if total else evento_parcial)
    origem = produto.localizacao_id

    if total:
        afetadas = _liberar_tudo(conn, produto)
        produto.localizacao_id = None
    else:
        afetadas = _retirar_estoque(conn, produto, quantidade)
        _nova_principal(conn, produto)

    produto.quantidade -= quantidade
    produto.status = novo
    ProdutoRepo(conn).atualizar(produto)
    mov = _registrar(conn, produto, TipoMovimentacao.EXIT, ator, quantidade, motivo, origem_id=origem)
    return {"produto": produto, "movimentacao": mov, "localizacoes": afetadas}


def _falha(operacao: str, dados: Dict[str, Any], e: Exception) -> None:
    log_transaction(operacao, dados, error=str(e))
    log_system_event(f"{operacao}_error", {"error": str(e), "code": getattr(e, "code", None)}, level="error")


def _sucesso(operacao: str, dados: Dict[str, Any], result: Dict[str, Any]) -> None:
    mov = result.get("movimentacao")
    if mov is not None:
        log_movimentacao(
            mov.tipo.value, mov.produto_id, mov.quantidade, mov.ator_id,
            origem=mov.origem_id, destino=mov.destino_id, peso_kg=mov.peso_kg,
        )
    produto = result["produto"]
    log_transaction(operacao, dados, result={"produto_id": produto.id, "status": produto.status.value})


# ----------------------
# cadastro
# ----------------------

def run_cadastrar_produto(
    nome: str,
    lote: str,
    quantidade: Any,
    peso_unitario_kg: Any,
    ator: Ator,
    status_inicial: StatusProduto = StatusProduto.AGUARDANDO_LOCACAO,
    tipo_semente_id: Optional[str] = None,
    cliente_id: Optional[str] = None,
    tipo_armazenamento: str = "saco",
    data_validade: Optional[str] = None,
    observacoes: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Registra um novo lote (colaborador de entrada, papel ADMIN)."""
    dados = {"nome": nome, "lote": lote, "quantidade": quantidade, "ator": ator.id}
    try:
        autorizar(ator, Evento.CADASTRAR)
        if not str(nome or "").strip():
            raise ValidationError("Nome do produto é obrigatório")
        if not str(lote or "").strip():
            raise ValidationError("Lote é obrigatório")
        status = StatusProduto(status_inicial)
        if status not in (StatusProduto.CADASTRADO, StatusProduto.AGUARDANDO_LOCACAO):
            raise ValidationError(
                f"Produto novo não pode nascer em {status.value}", status=status.value
            )
        armazenamento = str(tipo_armazenamento or "saco").strip().lower()
        if armazenamento not in TIPOS_ARMAZENAMENTO:
            raise ValidationError(
                f"Tipo de armazenamento deve ser saco ou bag, recebido {tipo_armazenamento!r}",
                tipo_armazenamento=tipo_armazenamento,
            )
        produto = Produto(
            id=None,
            nome=nome.strip(),
            lote=str(lote).strip(),
            quantidade=validar_quantidade(quantidade),
            peso_unitario_g=validar_peso_unitario(peso_unitario_kg),
            status=status,
            tipo_semente_id=tipo_semente_id,
            cliente_id=cliente_id,
            tipo_armazenamento=armazenamento,
            data_entrada=date.today().isoformat(),
            data_validade=validar_data(data_validade),
            observacoes=observacoes,
        )
        with transaction(db_path) as conn:
            ProdutoRepo(conn).insert(produto)
        result = {"produto": produto, "movimentacao": None, "localizacoes": []}
        _sucesso("cadastrar_produto", dados, result)
        return result
    except Exception as e:
        _falha("cadastrar_produto", dados, e)
        raise


def run_concluir_cadastro(produto_id: int, ator: Ator, db_path: str = DB_PATH) -> Dict[str, Any]:
    dados = {"produto_id": produto_id, "ator": ator.id}
    try:
        autorizar(ator, Evento.CONCLUIR_CADASTRO)
        with transaction(db_path) as conn:
            repo = ProdutoRepo(conn)
            produto = repo.get(produto_id)
            produto.status = transicionar(produto.status, Evento.CONCLUIR_CADASTRO)
            repo.atualizar(produto)
        result = {"produto": produto, "movimentacao": None, "localizacoes": []}
        _sucesso("concluir_cadastro", dados, result)
        return result
    except Exception as e:
        _falha("concluir_cadastro", dados, e)
        raise


# ----------------------
# localização
# ----------------------

def run_localizar(
    produto_id: int,
    localizacao_id: int,
    ator: Ator,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Coloca o produto numa localização livre (entrada física)."""
    dados = {"produto_id": produto_id, "localizacao_id": localizacao_id, "ator": ator.id}
    try:
        autorizar(ator, Evento.LOCALIZAR)
        with transaction(db_path) as conn:
            produto = ProdutoRepo(conn).get(produto_id)
            novo = transicionar(produto.status, Evento.LOCALIZAR)
            loc = LocalizacaoRepo(conn).claim_if_free(localizacao_id, produto.id, produto.peso_total_g)
            AlocacaoRepo(conn).criar(produto.id, localizacao_id, produto.quantidade)
            produto.status = novo
            produto.localizacao_id = localizacao_id
            ProdutoRepo(conn).atualizar(produto)
            mov = _registrar(conn, produto, TipoMovimentacao.ENTRY, ator, produto.quantidade,
                             motivo or "Entrada no estoque", destino_id=localizacao_id)
        result = {"produto": produto, "movimentacao": mov, "localizacoes": [loc]}
        _sucesso("localizar", dados, result)
        print_system(f">> Produto {produto.id} locado em {loc.codigo}")
        return result
    except Exception as e:
        _falha("localizar", dados, e)
        raise


def run_localizar_automatico(
    produto_id: int,
    ator: Ator,
    camara_id: Optional[int] = None,
    tentativas: Optional[int] = None,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """
    Busca a primeira localização livre (em ordem de coordenadas) que comporte
    o peso total do produto e tenta ocupá-la.

    Cada candidata é tentada na sua própria transação; se outra operação a
    ocupar antes (``LocationOccupiedError``) ou alterar o produto
    (``ConflictError``), passa-se à próxima. No máximo ``tentativas``
    candidatas são tentadas.
    """
    dados = {"produto_id": produto_id, "camara_id": camara_id, "ator": ator.id}
    try:
        limite = DEFAULTS.tentativas_localizacao if tentativas is None else tentativas
        if isinstance(limite, bool) or not isinstance(limite, int) or limite < 1:
            raise ValidationError("tentativas deve ser um inteiro maior que zero", tentativas=tentativas)
        autorizar(ator, Evento.LOCALIZAR)
        with connect(db_path) as conn:
            produto = ProdutoRepo(conn).get(produto_id)
            transicionar(produto.status, Evento.LOCALIZAR)
            candidatas = LocalizacaoRepo(conn).find_available(
                camara_id=camara_id, peso_minimo_g=produto.peso_total_g, limite=limite
            )

        ultimo_erro: Optional[Exception] = None
        for loc in candidatas:
            try:
                result = run_localizar(produto_id, loc.id, ator, motivo or "Localização automática", db_path=db_path)
            except (LocationOccupiedError, ConflictError) as e:
                log_system_event("localizar_automatico_retry", {"produto_id": produto_id, "localizacao_id": loc.id, "error": e.code}, level="warning")
                ultimo_erro = e
                continue
            log_transaction("localizar_automatico", dados, result={"produto_id": produto_id, "localizacao_id": loc.id})
            return result

        raise NotFoundError(
            f"Nenhuma localização disponível comporta {produto.peso_total_kg} kg",
            produto_id=produto_id,
            candidatas=len(candidatas),
            ultimo_erro=getattr(ultimo_erro, "code", None),
        )
    except Exception as e:
        _falha("localizar_automatico", dados, e)
        raise


# ----------------------
# movimentações
# ----------------------

def run_mover(
    produto_id: int,
    destino_id: int,
    ator: Ator,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Consolida todo o estoque do produto em ``destino_id``.

    O destino precisa estar livre ou já ser uma das localizações do produto.
    """
    dados = {"produto_id": produto_id, "destino_id": destino_id, "ator": ator.id}
    try:
        autorizar(ator, Evento.MOVER)
        with transaction(db_path) as conn:
            produtos = ProdutoRepo(conn)
            locs = LocalizacaoRepo(conn)
            alocs = AlocacaoRepo(conn)

            produto = produtos.get(produto_id)
            novo = transicionar(produto.status, Evento.MOVER)
            origem = produto.localizacao_id
            todas = alocs.listar_por_produto(produto.id)
            propria = next((a for a in todas if a.localizacao_id == destino_id), None)

            if propria is not None and len(todas) == 1:
                raise ValidationError(
                    "Produto já está inteiramente nesta localização", localizacao_id=destino_id
                )

            afetadas: List[Localizacao] = []
            if propria is None:
                destino = locs.claim_if_free(destino_id, produto.id, produto.peso_total_g)
                for a in todas:
                    afetadas.append(locs.release_if_occupant(a.localizacao_id, produto.id))
                alocs.remover_por_produto(produto.id)
                alocs.criar(produto.id, destino_id, produto.quantidade)
            else:
                outras = [a for a in todas if a is not propria]
                for a in outras:
                    afetadas.append(locs.release_if_occupant(a.localizacao_id, produto.id))
                    alocs.definir_quantidade(a.id, 0)
                destino = locs.adjust_weight_if_within_capacity(
                    destino_id, produto.id,
                    peso_total_g(produto.quantidade - propria.quantidade, produto.peso_unitario_g),
                )
                alocs.definir_quantidade(propria.id, produto.quantidade)
            afetadas.append(destino)

            produto.status = novo
            produto.localizacao_id = destino_id
            produtos.atualizar(produto)
            mov = _registrar(conn, produto, TipoMovimentacao.TRANSFER, ator, produto.quantidade,
                             motivo or "Transferência", origem_id=origem, destino_id=destino_id)
        result = {"produto": produto, "movimentacao": mov, "localizacoes": afetadas}
        _sucesso("mover", dados, result)
        return result
    except Exception as e:
        _falha("mover", dados, e)
        raise


def run_mover_parcial(
    produto_id: int,
    quantidade: Any,
    destino_id: int,
    ator: Ator,
    motivo: Optional[str] = None,
    origem_id: Optional[int] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """
    Move parte do estoque de uma localização do produto (padrão: a principal)
    para ``destino_id``.

    Regras:
        - 0 < quantidade < quantidade total do produto
        - quantidade ≤ quantidade alocada na origem
        - destino livre (é ocupado) ou já do mesmo produto (recebe o peso);
          ocupado por outro produto → ``LocationOccupiedError``
        - origem esvaziada é liberada
    """
    dados = {"produto_id": produto_id, "quantidade": quantidade, "destino_id": destino_id, "ator": ator.id}
    try:
        autorizar(ator, Evento.MOVER_PARCIAL)
        qtd = validar_quantidade(quantidade)
        with transaction(db_path) as conn:
            produtos = ProdutoRepo(conn)
            locs = LocalizacaoRepo(conn)
            alocs = AlocacaoRepo(conn)

            produto = produtos.get(produto_id)
            novo = transicionar(produto.status, Evento.MOVER_PARCIAL)
            if qtd >= produto.quantidade:
                raise ValidationError(
                    f"Movimentação parcial exige quantidade menor que o total ({produto.quantidade}); "
                    "use a movimentação total",
                    quantidade=qtd,
                    total=produto.quantidade,
                )
            origem = produto.localizacao_id if origem_id is None else origem_id
            if origem == destino_id:
                raise ValidationError("Origem e destino são a mesma localização", localizacao_id=destino_id)
            aloc_origem = alocs.get_por_localizacao(origem)
            if aloc_origem is None or aloc_origem.produto_id != produto.id:
                raise ValidationError(
                    f"Produto {produto.id} não está na localização {origem}", localizacao_id=origem
                )
            if qtd > aloc_origem.quantidade:
                raise ValidationError(
                    f"Quantidade ({qtd}) excede a alocada na origem ({aloc_origem.quantidade})",
                    quantidade=qtd,
                    alocada=aloc_origem.quantidade,
                )

            peso = peso_total_g(qtd, produto.peso_unitario_g)
            aloc_destino = alocs.get_por_localizacao(destino_id)
            if aloc_destino is not None and aloc_destino.produto_id == produto.id:
                destino = locs.adjust_weight_if_within_capacity(destino_id, produto.id, peso)
                alocs.definir_quantidade(aloc_destino.id, aloc_destino.quantidade + qtd)
            else:
                destino = locs.claim_if_free(destino_id, produto.id, peso)
                alocs.criar(produto.id, destino_id, qtd)

            if qtd == aloc_origem.quantidade:
                fonte = locs.release_if_occupant(origem, produto.id)
            else:
                fonte = locs.adjust_weight_if_within_capacity(origem, produto.id, -peso)
            alocs.definir_quantidade(aloc_origem.id, aloc_origem.quantidade - qtd)

            _nova_principal(conn, produto)
            produto.status = novo
            produtos.atualizar(produto)
            mov = _registrar(conn, produto, TipoMovimentacao.PARTIAL_TRANSFER, ator, qtd,
                             motivo or "Movimentação parcial", origem_id=origem, destino_id=destino_id)
        result = {"produto": produto, "movimentacao": mov, "localizacoes": [fonte, destino]}
        _sucesso("mover_parcial", dados, result)
        return result
    except Exception as e:
        _falha("mover_parcial", dados, e)
        raise


def run_adicionar_estoque(
    produto_id: int,
    quantidade: Any,
    ator: Ator,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Acrescenta unidades do mesmo lote na localização principal."""
    dados = {"produto_id": produto_id, "quantidade": quantidade, "ator": ator.id}
    try:
        autorizar(ator, Evento.ADICIONAR_ESTOQUE)
        qtd = validar_quantidade(quantidade)
        with transaction(db_path) as conn:
            produtos = ProdutoRepo(conn)
            alocs = AlocacaoRepo(conn)
            produto = produtos.get(produto_id)
            novo = transicionar(produto.status, Evento.ADICIONAR_ESTOQUE)
            if produto.quantidade + qtd > DEFAULTS.quantidade_max:
                raise ValidationError(
                    f"Lote passaria do máximo de {DEFAULTS.quantidade_max} unidades",
                    quantidade=produto.quantidade,
                    adicionar=qtd,
                )
            principal = produto.localizacao_id
            loc = LocalizacaoRepo(conn).adjust_weight_if_within_capacity(
                principal, produto.id, peso_total_g(qtd, produto.peso_unitario_g)
            )
            aloc = alocs.get_por_localizacao(principal)
            alocs.definir_quantidade(aloc.id, aloc.quantidade + qtd)
            produto.quantidade += qtd
            produto.status = novo
            produtos.atualizar(produto)
            mov = _registrar(conn, produto, TipoMovimentacao.STOCK_ADD, ator, qtd,
                             motivo or "Adição de estoque", destino_id=principal)
        result = {"produto": produto, "movimentacao": mov, "localizacoes": [loc]}
        _sucesso("adicionar_estoque", dados, result)
        return result
    except Exception as e:
        _falha("adicionar_estoque", dados, e)
        raise


# ----------------------
# saídas e remoção
# ----------------------

def run_saida_parcial(
    produto_id: int,
    quantidade: Any,
    ator: Ator,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Saída direta de estoque. Retirar tudo leva o produto a REMOVIDO."""
    dados = {"produto_id": produto_id, "quantidade": quantidade, "ator": ator.id}
    try:
        autorizar(ator, Evento.SAIDA_PARCIAL)
        qtd = validar_quantidade(quantidade)
        with transaction(db_path) as conn:
            produto = ProdutoRepo(conn).get(produto_id)
            result = saida_em_transacao(
                conn, produto, qtd, ator, motivo or "Saída manual de estoque",
                Evento.SAIDA_PARCIAL, Evento.SAIDA_TOTAL,
            )
        _sucesso("saida_parcial", dados, result)
        return result
    except Exception as e:
        _falha("saida_parcial", dados, e)
        raise


def run_saida_total(
    produto_id: int,
    ator: Ator,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    dados = {"produto_id": produto_id, "ator": ator.id}
    try:
        autorizar(ator, Evento.SAIDA_TOTAL)
        with transaction(db_path) as conn:
            produto = ProdutoRepo(conn).get(produto_id)
            result = saida_em_transacao(
                conn, produto, produto.quantidade, ator, motivo or "Saída total de estoque",
                Evento.SAIDA_PARCIAL, Evento.SAIDA_TOTAL,
            )
        _sucesso("saida_total", dados, result)
        return result
    except Exception as e:
        _falha("saida_total", dados, e)
        raise


def run_remover(
    produto_id: int,
    ator: Ator,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Remove o produto do sistema.

    Produto locado: libera todas as localizações e registra a saída.
    Produto ainda sem localização: apenas muda o status.
    """
    dados = {"produto_id": produto_id, "ator": ator.id}
    try:
        autorizar(ator, Evento.REMOVER)
        with transaction(db_path) as conn:
            produtos = ProdutoRepo(conn)
            produto = produtos.get(produto_id)
            novo = transicionar(produto.status, Evento.REMOVER)
            mov = None
            afetadas: List[Localizacao] = []
            if produto.status == StatusProduto.LOCADO:
                origem = produto.localizacao_id
                quantidade = produto.quantidade
                afetadas = _liberar_tudo(conn, produto)
                produto.localizacao_id = None
                produto.quantidade = 0
                produto.status = novo
                produtos.atualizar(produto)
                mov = _registrar(conn, produto, TipoMovimentacao.EXIT, ator, quantidade,
                                 motivo or "Remoção do produto", origem_id=origem)
            else:
                produto.status = novo
                produtos.atualizar(produto)
        result = {"produto": produto, "movimentacao": mov, "localizacoes": afetadas}
        _sucesso("remover", dados, result)
        return result
    except Exception as e:
        _falha("remover", dados, e)
        raise


# ----------------------
# consultas
# ----------------------

def obter_produto(produto_id: int, db_path: str = DB_PATH) -> Produto:
    with connect(db_path) as conn:
        return ProdutoRepo(conn).get(produto_id)


def listar_produtos(status: Optional[List[StatusProduto]] = None, db_path: str = DB_PATH) -> List[Produto]:
    with connect(db_path) as conn:
        return ProdutoRepo(conn).listar(status)


def listar_disponiveis(
    peso_minimo_kg: Any = 0,
    camara_id: Optional[int] = None,
    limite: Optional[int] = None,
    db_path: str = DB_PATH,
) -> List[Localizacao]:
    with connect(db_path) as conn:
        return LocalizacaoRepo(conn).find_available(
            camara_id=camara_id, peso_minimo_g=kg_para_g(peso_minimo_kg or 0), limite=limite
        )
