# sementes/adapters/cli.py
"""
CLI do sistema de armazenagem de sementes (Typer).

Comandos principais:
- migrate                          -> aplica migrações e cria views
- camara criar|gerar-localizacoes|listar|ambiente
- loc disponiveis                  -> localizações livres
- produto cadastrar|concluir|localizar|localizar-auto|mover|mover-parcial|
          adicionar|saida-parcial|saida-total|remover|listar|historico
- retirada solicitar|confirmar|cancelar|pendentes
- rel ocupacao|capacidade|retiradas|vencimentos|localizacao
- importar <xlsx>                  -> cadastra lotes a partir de planilha

A identidade de quem opera vem de ``--ator`` e ``--papel`` (ADMIN ou
OPERATOR). Erros de negócio aparecem num painel vermelho com o código do
erro e o comando termina com status 1.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sementes.adapters.parsers import parse_localizacao
from sementes.config import DB_PATH
from sementes.domain.errors import SementesError, ValidationError
from sementes.domain.models import Ator, Dimensoes, Papel, Produto, StatusProduto
from sementes.infra.migrations import apply_migrations
from sementes.infra.views import create_views
from sementes.usecases.gerar_localizacoes import (
    listar_camaras,
    obter_localizacao_por_coordenada,
    run_atualizar_ambiente,
    run_criar_camara,
    run_gerar_localizacoes,
)
from sementes.usecases.importar_produtos import run_importar_produtos
from sementes.usecases.movimentar_produto import (
    listar_disponiveis,
    listar_produtos,
    run_adicionar_estoque,
    run_cadastrar_produto,
    run_concluir_cadastro,
    run_localizar,
    run_localizar_automatico,
    run_mover,
    run_mover_parcial,
    run_remover,
    run_saida_parcial,
    run_saida_total,
)
from sementes.usecases.relatorios import (
    exportar_xlsx,
    historico_localizacao,
    historico_produto,
    relatorio_ocupacao,
    relatorio_proximas_capacidade,
    relatorio_retiradas,
    relatorio_vencimentos,
)
from sementes.usecases.retiradas import (
    listar_pendentes,
    run_cancelar_retirada,
    run_confirmar_retirada,
    run_solicitar_retirada,
)


app = typer.Typer(help="Armazenagem de Sementes — CLI")
console = Console()

ATOR_PADRAO = os.environ.get("SEMENTES_ATOR", "cli")


# -----------------------
# util
# -----------------------

def _db_option():
    return typer.Option(DB_PATH, "--db", help="Caminho do SQLite")


def _ator_option():
    return typer.Option(ATOR_PADRAO, "--ator", help="Identificador de quem executa")


def _papel_option(padrao: Papel):
    return typer.Option(padrao.value, "--papel", help="ADMIN ou OPERATOR")


def _ator(ator_id: str, papel: str) -> Ator:
    try:
        return Ator(ator_id, Papel(papel.strip().upper()))
    except ValueError:
        console.print(Panel(f"Papel inválido: {papel}", title="VALIDATION", border_style="red"))
        raise typer.Exit(code=1)


@contextmanager
def _erros() -> Iterator[None]:
    """Converte erros do domínio em painel vermelho + exit 1."""
    try:
        yield
    except SementesError as e:
        corpo = e.message
        if e.data:
            corpo += "\n[dim]" + ", ".join(f"{k}={v}" for k, v in e.data.items()) + "[/dim]"
        console.print(Panel(corpo, title=e.code, border_style="red"))
        raise typer.Exit(code=1)


def _resolver_localizacao(valor: str, camara_id: Optional[int], db_path: str) -> int:
    """ID numérico passa direto; código Q-L-F-A é procurado na câmara."""
    valor = valor.strip()
    if valor.isdigit():
        return int(valor)
    if camara_id is None:
        raise ValidationError("Informe --camara para localizar por código", codigo=valor)
    coord = parse_localizacao(valor)
    return obter_localizacao_por_coordenada(camara_id, coord, db_path=db_path).id


def _fmt(val: Any) -> str:
    if val is None:
        return "-"
    if isinstance(val, bool):
        return "sim" if val else "não"
    if isinstance(val, float):
        return f"{val:,.3f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return str(getattr(val, "value", val))


def _display_tabela(colunas: List[str], linhas: List[List[Any]], msg: Optional[str], title: str) -> None:
    if not linhas:
        console.print(Panel(msg or "Nenhum dado encontrado", title=title, border_style="yellow"))
        return
    table = Table(title=title, box=box.ROUNDED)
    for col in colunas:
        numerica = any(k in col.lower() for k in ("kg", "quantidade", "%", "dias", "localizações", "ocupadas", "livres"))
        table.add_column(col, justify="right" if numerica else "left")
    for linha in linhas:
        table.add_row(*[_fmt(v) for v in linha])
    console.print(table)
    if msg:
        console.print(f"[dim]{msg}[/dim]")


def _display_produto(p: Produto, title: str = "Produto") -> None:
    table = Table(title=title, box=box.ROUNDED, show_header=False)
    table.add_column("Campo")
    table.add_column("Valor")
    cor = {
        StatusProduto.LOCADO: "green",
        StatusProduto.AGUARDANDO_RETIRADA: "yellow",
        StatusProduto.RETIRADO: "blue",
        StatusProduto.REMOVIDO: "red",
    }.get(p.status, "white")
    for campo, valor in (
        ("ID", p.id),
        ("Nome", p.nome),
        ("Lote", p.lote),
        ("Status", f"[bold {cor}]{p.status.value}[/]"),
        ("Quantidade", p.quantidade),
        ("Peso unitário (kg)", p.peso_unitario_kg),
        ("Peso total (kg)", p.peso_total_kg),
        ("Localização", p.localizacao_id),
        ("Armazenamento", p.tipo_armazenamento),
        ("Validade", p.data_validade),
    ):
        table.add_row(campo, _fmt(valor))
    console.print(table)


def _display_resultado(res: Dict[str, Any], title: str) -> None:
    _display_produto(res["produto"], title=title)
    mov = res.get("movimentacao")
    if mov is not None:
        console.print(
            f"[dim]Movimentação #{mov.id} {mov.tipo.value}: {mov.quantidade} un. "
            f"({_fmt(mov.peso_kg)} kg) {mov.origem_id or '-'} → {mov.destino_id or '-'}[/dim]"
        )
    for loc in res.get("localizacoes") or []:
        estado = f"ocupada por {loc.produto_id}" if loc.ocupada else "livre"
        console.print(f"[dim]{loc.codigo}: {_fmt(loc.peso_atual_kg)}/{_fmt(loc.capacidade_max_kg)} kg, {estado}[/dim]")


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = _db_option()):
    """Aplica migrações e recria as views auxiliares."""
    with _erros():
        versao = apply_migrations(db_path)
        create_views(db_path)
    typer.echo(f">> Migrações aplicadas (versão {versao}) e views criadas em: {db_path}")


# -----------------------
# câmaras e localizações
# -----------------------

camara_app = typer.Typer(help="Câmaras refrigeradas e geração de localizações.")
app.add_typer(camara_app, name="camara")


@camara_app.command("criar")
def cmd_camara_criar(
    nome: str = typer.Option(..., help="Nome da câmara"),
    quadras: int = typer.Option(..., help="Número de quadras"),
    lados: int = typer.Option(..., help="Número de lados (A..T)"),
    filas: int = typer.Option(..., help="Número de filas"),
    andares: int = typer.Option(..., help="Número de andares"),
    capacidade_kg: Optional[float] = typer.Option(None, help="Capacidade de cada localização (kg)"),
    temperatura: Optional[float] = typer.Option(None, help="Temperatura (°C)"),
    umidade: Optional[float] = typer.Option(None, help="Umidade relativa (%)"),
    sem_localizacoes: bool = typer.Option(False, "--sem-localizacoes", help="Não gera as localizações agora"),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Cadastra uma câmara e gera suas localizações."""
    with _erros():
        res = run_criar_camara(
            nome, Dimensoes(quadras, lados, filas, andares), _ator(ator, papel),
            capacidade_kg=capacidade_kg, temperatura=temperatura, umidade=umidade,
            gerar=not sem_localizacoes, db_path=db_path,
        )
    cam = res["camara"]
    typer.echo(f">> Câmara {cam.id} ({cam.nome}) criada com {res['criadas']} localizações.")


@camara_app.command("gerar-localizacoes")
def cmd_camara_gerar(
    camara_id: int = typer.Argument(..., help="ID da câmara"),
    quadras: Optional[int] = typer.Option(None, help="Novas quadras"),
    lados: Optional[int] = typer.Option(None, help="Novos lados"),
    filas: Optional[int] = typer.Option(None, help="Novas filas"),
    andares: Optional[int] = typer.Option(None, help="Novos andares"),
    capacidade_kg: Optional[float] = typer.Option(None, help="Capacidade das localizações criadas (kg)"),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """(Re)gera as localizações; informe as quatro dimensões para redimensionar."""
    novas = [quadras, lados, filas, andares]
    if any(v is not None for v in novas) and not all(v is not None for v in novas):
        console.print(Panel("Informe quadras, lados, filas e andares juntos", title="VALIDATION", border_style="red"))
        raise typer.Exit(code=1)
    dim = Dimensoes(quadras, lados, filas, andares) if quadras is not None else None
    with _erros():
        res = run_gerar_localizacoes(camara_id, _ator(ator, papel), dimensoes=dim,
                                     capacidade_kg=capacidade_kg, db_path=db_path)
    typer.echo(
        f">> Câmara {camara_id}: {res['criadas']} criadas, {res['removidas']} removidas, "
        f"{res['total']} no total."
    )


@camara_app.command("listar")
def cmd_camara_listar(db_path: str = _db_option()):
    """Lista as câmaras cadastradas."""
    with _erros():
        camaras = listar_camaras(db_path)
    linhas = [
        [c.id, c.nome, f"{c.dimensoes.quadras}x{c.dimensoes.lados}x{c.dimensoes.filas}x{c.dimensoes.andares}",
         c.dimensoes.total, c.capacidade_padrao_kg, c.temperatura, c.umidade]
        for c in camaras
    ]
    _display_tabela(
        ["ID", "Nome", "Dimensões", "Localizações", "Capacidade padrão (kg)", "Temperatura", "Umidade"],
        linhas, "Nenhuma câmara cadastrada." if not linhas else None, "Câmaras",
    )


@camara_app.command("ambiente")
def cmd_camara_ambiente(
    camara_id: int = typer.Argument(..., help="ID da câmara"),
    temperatura: Optional[float] = typer.Option(None, help="Temperatura (°C)"),
    umidade: Optional[float] = typer.Option(None, help="Umidade relativa (%)"),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Registra temperatura e umidade da câmara (ADMIN)."""
    with _erros():
        cam = run_atualizar_ambiente(camara_id, temperatura, umidade, _ator(ator, papel), db_path=db_path)
    typer.echo(f">> Câmara {cam.id}: temperatura={_fmt(cam.temperatura)} umidade={_fmt(cam.umidade)}")


loc_app = typer.Typer(help="Consulta de localizações.")
app.add_typer(loc_app, name="loc")


@loc_app.command("disponiveis")
def cmd_loc_disponiveis(
    camara: Optional[int] = typer.Option(None, help="Filtrar por câmara"),
    peso_kg: float = typer.Option(0.0, help="Capacidade mínima (kg)"),
    limite: int = typer.Option(50, help="Máximo de linhas"),
    db_path: str = _db_option(),
):
    """Lista localizações livres em ordem de coordenadas."""
    with _erros():
        locs = listar_disponiveis(peso_minimo_kg=peso_kg, camara_id=camara, limite=limite, db_path=db_path)
    linhas = [[l.id, l.camara_id, l.codigo, l.nivel_acesso, l.capacidade_max_kg] for l in locs]
    _display_tabela(["ID", "Câmara", "Código", "Acesso", "Capacidade (kg)"], linhas,
                    None if linhas else "Nenhuma localização disponível.", "Localizações Disponíveis")


# -----------------------
# produtos
# -----------------------

produto_app = typer.Typer(help="Ciclo de vida dos lotes de sementes.")
app.add_typer(produto_app, name="produto")


@produto_app.command("cadastrar")
def cmd_produto_cadastrar(
    nome: str = typer.Option(..., help="Nome do produto"),
    lote: str = typer.Option(..., help="Lote"),
    quantidade: int = typer.Option(..., help="Quantidade de unidades"),
    peso_unitario_kg: str = typer.Option(..., help="Peso por unidade (kg), ex.: 25 ou 25,5"),
    tipo_semente: Optional[str] = typer.Option(None, help="Tipo de semente"),
    cliente: Optional[str] = typer.Option(None, help="Cliente"),
    armazenamento: str = typer.Option("saco", help="saco | bag"),
    validade: Optional[str] = typer.Option(None, help="Data de validade (YYYY-MM-DD)"),
    observacoes: Optional[str] = typer.Option(None, help="Observações"),
    rascunho: bool = typer.Option(False, "--rascunho", help="Cria em CADASTRADO (cadastro incompleto)"),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Cadastra um lote (ADMIN)."""
    with _erros():
        res = run_cadastrar_produto(
            nome, lote, quantidade, peso_unitario_kg, _ator(ator, papel),
            status_inicial=StatusProduto.CADASTRADO if rascunho else StatusProduto.AGUARDANDO_LOCACAO,
            tipo_semente_id=tipo_semente, cliente_id=cliente, tipo_armazenamento=armazenamento,
            data_validade=validade, observacoes=observacoes, db_path=db_path,
        )
    _display_resultado(res, "Produto Cadastrado")


@produto_app.command("concluir")
def cmd_produto_concluir(
    produto_id: int = typer.Argument(...),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Conclui o cadastro: CADASTRADO → AGUARDANDO_LOCACAO."""
    with _erros():
        res = run_concluir_cadastro(produto_id, _ator(ator, papel), db_path=db_path)
    _display_resultado(res, "Cadastro Concluído")


@produto_app.command("localizar")
def cmd_produto_localizar(
    produto_id: int = typer.Argument(...),
    localizacao: str = typer.Argument(..., help="ID da localização ou código (Q1-LA-F1-A1, exige --camara)"),
    camara: Optional[int] = typer.Option(None, help="Câmara do código informado"),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.OPERATOR),
    db_path: str = _db_option(),
):
    """Coloca o produto numa localização livre (OPERATOR)."""
    with _erros():
        localizacao_id = _resolver_localizacao(localizacao, camara, db_path)
        res = run_localizar(produto_id, localizacao_id, _ator(ator, papel), motivo, db_path=db_path)
    _display_resultado(res, "Produto Locado")


@produto_app.command("localizar-auto")
def cmd_produto_localizar_auto(
    produto_id: int = typer.Argument(...),
    camara: Optional[int] = typer.Option(None, help="Restringe a busca a uma câmara"),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.OPERATOR),
    db_path: str = _db_option(),
):
    """Escolhe a primeira localização livre que comporte o produto."""
    with _erros():
        res = run_localizar_automatico(produto_id, _ator(ator, papel), camara_id=camara, db_path=db_path)
    _display_resultado(res, "Produto Locado")


@produto_app.command("mover")
def cmd_produto_mover(
    produto_id: int = typer.Argument(...),
    destino_id: int = typer.Argument(...),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.OPERATOR),
    db_path: str = _db_option(),
):
    """Move todo o estoque do produto para outra localização."""
    with _erros():
        res = run_mover(produto_id, destino_id, _ator(ator, papel), motivo, db_path=db_path)
    _display_resultado(res, "Produto Movido")


@produto_app.command("mover-parcial")
def cmd_produto_mover_parcial(
    produto_id: int = typer.Argument(...),
    quantidade: int = typer.Argument(...),
    destino_id: int = typer.Argument(...),
    origem: Optional[int] = typer.Option(None, help="Localização de origem (padrão: a principal)"),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.OPERATOR),
    db_path: str = _db_option(),
):
    """Move parte do estoque para outra localização."""
    with _erros():
        res = run_mover_parcial(produto_id, quantidade, destino_id, _ator(ator, papel), motivo,
                                origem_id=origem, db_path=db_path)
    _display_resultado(res, "Movimentação Parcial")


@produto_app.command("adicionar")
def cmd_produto_adicionar(
    produto_id: int = typer.Argument(...),
    quantidade: int = typer.Argument(...),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Acrescenta unidades na localização principal (ADMIN)."""
    with _erros():
        res = run_adicionar_estoque(produto_id, quantidade, _ator(ator, papel), motivo, db_path=db_path)
    _display_resultado(res, "Estoque Adicionado")


@produto_app.command("saida-parcial")
def cmd_produto_saida_parcial(
    produto_id: int = typer.Argument(...),
    quantidade: int = typer.Argument(...),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Saída direta de estoque (ADMIN); retirar tudo remove o produto."""
    with _erros():
        res = run_saida_parcial(produto_id, quantidade, _ator(ator, papel), motivo, db_path=db_path)
    _display_resultado(res, "Saída Registrada")


@produto_app.command("saida-total")
def cmd_produto_saida_total(
    produto_id: int = typer.Argument(...),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Retira todo o estoque locado; o produto vai para REMOVIDO (ADMIN)."""
    with _erros():
        res = run_saida_total(produto_id, _ator(ator, papel), motivo, db_path=db_path)
    _display_resultado(res, "Saída Total")


@produto_app.command("remover")
def cmd_produto_remover(
    produto_id: int = typer.Argument(...),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Remove o produto do sistema (ADMIN)."""
    with _erros():
        res = run_remover(produto_id, _ator(ator, papel), motivo, db_path=db_path)
    _display_resultado(res, "Produto Removido")


@produto_app.command("listar")
def cmd_produto_listar(
    status: Optional[List[str]] = typer.Option(None, help="Filtra por status (repetível)"),
    db_path: str = _db_option(),
):
    """Lista produtos."""
    with _erros():
        try:
            filtro = [StatusProduto(s.strip().upper()) for s in status] if status else None
        except ValueError:
            console.print(Panel(f"Status inválido: {status}", title="VALIDATION", border_style="red"))
            raise typer.Exit(code=1)
        produtos = listar_produtos(filtro, db_path=db_path)
    linhas = [[p.id, p.nome, p.lote, p.status.value, p.quantidade, p.peso_total_kg, p.localizacao_id] for p in produtos]
    _display_tabela(["ID", "Nome", "Lote", "Status", "Quantidade", "Peso (kg)", "Localização"], linhas,
                    None if linhas else "Nenhum produto.", "Produtos")


@produto_app.command("historico")
def cmd_produto_historico(
    produto_id: int = typer.Argument(...),
    db_path: str = _db_option(),
):
    """Movimentações do produto em ordem cronológica."""
    with _erros():
        colunas, linhas, msg = historico_produto(produto_id, db_path=db_path)
    _display_tabela(colunas, linhas, msg, f"Histórico do Produto {produto_id}")


# -----------------------
# retiradas
# -----------------------

retirada_app = typer.Typer(help="Fluxo de retirada: ADMIN solicita, OPERATOR confirma.")
app.add_typer(retirada_app, name="retirada")


@retirada_app.command("solicitar")
def cmd_retirada_solicitar(
    produto_id: int = typer.Argument(...),
    tipo: str = typer.Option("TOTAL", help="TOTAL | PARCIAL"),
    quantidade: Optional[int] = typer.Option(None, help="Obrigatória para PARCIAL"),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Abre uma solicitação de retirada."""
    with _erros():
        res = run_solicitar_retirada(produto_id, tipo, _ator(ator, papel), quantidade=quantidade,
                                     motivo=motivo, db_path=db_path)
    typer.echo(f">> Solicitação {res['solicitacao'].id} criada ({res['solicitacao'].tipo.value}).")
    _display_resultado(res, "Retirada Solicitada")


@retirada_app.command("confirmar")
def cmd_retirada_confirmar(
    solicitacao_id: int = typer.Argument(...),
    observacoes: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.OPERATOR),
    db_path: str = _db_option(),
):
    """Confirma a retirada física (OPERATOR)."""
    with _erros():
        res = run_confirmar_retirada(solicitacao_id, _ator(ator, papel), observacoes, db_path=db_path)
    _display_resultado(res, "Retirada Confirmada")


@retirada_app.command("cancelar")
def cmd_retirada_cancelar(
    solicitacao_id: int = typer.Argument(...),
    motivo: Optional[str] = typer.Option(None),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Cancela uma solicitação pendente (ADMIN)."""
    with _erros():
        res = run_cancelar_retirada(solicitacao_id, _ator(ator, papel), motivo, db_path=db_path)
    _display_resultado(res, "Retirada Cancelada")


@retirada_app.command("pendentes")
def cmd_retirada_pendentes(db_path: str = _db_option()):
    """Solicitações pendentes, mais antigas primeiro."""
    with _erros():
        itens = listar_pendentes(db_path=db_path)
    estilo = {"overdue": "bold red", "urgent": "bold yellow", "normal": "green"}
    linhas = [
        [i["solicitacao"].id, i["solicitacao"].produto_id, i["solicitacao"].tipo.value,
         i["solicitacao"].quantidade_solicitada, i["solicitacao"].solicitado_por,
         i["dias_espera"], f"[{estilo.get(i['urgencia'], 'white')}]{i['urgencia']}[/]"]
        for i in itens
    ]
    _display_tabela(["ID", "Produto", "Tipo", "Quantidade", "Solicitado por", "Dias", "Urgência"], linhas,
                    None if linhas else "Nenhuma solicitação pendente.", "Retiradas Pendentes")


# -----------------------
# relatórios
# -----------------------

rel_app = typer.Typer(help="Relatórios de armazenagem")
app.add_typer(rel_app, name="rel")


def _saida_relatorio(tabela, title: str, xlsx: Optional[str]) -> None:
    colunas, linhas, msg = tabela
    _display_tabela(colunas, linhas, msg, title)
    if xlsx:
        exportar_xlsx(colunas, linhas, xlsx)
        typer.echo(f">> Relatório exportado para {xlsx}")


@rel_app.command("ocupacao")
def rel_ocupacao(
    camara: Optional[int] = typer.Option(None, help="Filtrar por câmara"),
    xlsx: Optional[str] = typer.Option(None, help="Exporta para XLSX"),
    db_path: str = _db_option(),
):
    """Ocupação por câmara."""
    with _erros():
        tabela = relatorio_ocupacao(camara_id=camara, db_path=db_path)
    _saida_relatorio(tabela, "Ocupação das Câmaras", xlsx)


@rel_app.command("capacidade")
def rel_capacidade(
    limiar: Optional[int] = typer.Option(None, help="Uso mínimo (%)"),
    xlsx: Optional[str] = typer.Option(None, help="Exporta para XLSX"),
    db_path: str = _db_option(),
):
    """Localizações próximas da capacidade."""
    with _erros():
        tabela = relatorio_proximas_capacidade(limiar_pct=limiar, db_path=db_path)
    _saida_relatorio(tabela, "Localizações Próximas da Capacidade", xlsx)


@rel_app.command("retiradas")
def rel_retiradas(
    inicio: Optional[str] = typer.Option(None, help="YYYY-MM-DD"),
    fim: Optional[str] = typer.Option(None, help="YYYY-MM-DD"),
    xlsx: Optional[str] = typer.Option(None, help="Exporta para XLSX"),
    db_path: str = _db_option(),
):
    """Resumo das solicitações de retirada."""
    with _erros():
        tabela = relatorio_retiradas(inicio, fim, db_path=db_path)
    _saida_relatorio(tabela, "Retiradas", xlsx)


@rel_app.command("vencimentos")
def rel_vencimentos(
    janela_dias: int = typer.Option(30, help="Dias até o vencimento"),
    xlsx: Optional[str] = typer.Option(None, help="Exporta para XLSX"),
    db_path: str = _db_option(),
):
    """Lotes vencidos ou a vencer na janela."""
    with _erros():
        tabela = relatorio_vencimentos(janela_dias=janela_dias, db_path=db_path)
    _saida_relatorio(tabela, f"Vencimentos (Próximos {janela_dias} dias)", xlsx)


@rel_app.command("localizacao")
def rel_localizacao(
    localizacao_id: int = typer.Argument(...),
    db_path: str = _db_option(),
):
    """Movimentações que passaram por uma localização."""
    with _erros():
        tabela = historico_localizacao(localizacao_id, db_path=db_path)
    _saida_relatorio(tabela, f"Histórico da Localização {localizacao_id}", None)


# -----------------------
# importação
# -----------------------

@app.command("importar")
def cmd_importar(
    path: str = typer.Argument(..., help="Caminho do XLSX de lotes"),
    ator: str = _ator_option(),
    papel: str = _papel_option(Papel.ADMIN),
    db_path: str = _db_option(),
):
    """Cadastra lotes a partir de uma planilha XLSX."""
    with _erros():
        res = run_importar_produtos(path, _ator(ator, papel), db_path=db_path)

    console.print(Panel(
        f"Linhas lidas: {res['linhas']}\nProdutos criados: {len(res['criados'])}\nLinhas com erro: {len(res['erros'])}",
        title="Importação de Lotes",
    ))
    if res["criados"]:
        _display_tabela(
            ["Linha", "ID", "Produto", "Lote", "Quantidade", "Peso (kg)", "Localização sugerida"],
            [[c["linha"], c["produto"].id, c["produto"].nome, c["produto"].lote, c["produto"].quantidade,
              c["produto"].peso_total_kg, c["localizacao"]] for c in res["criados"]],
            None, "Produtos Criados",
        )
    if res["erros"]:
        _display_tabela(["Linha", "Erro"], [[e["linha"], "; ".join(e["mensagens"])] for e in res["erros"]],
                        None, "Erros Encontrados")


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
