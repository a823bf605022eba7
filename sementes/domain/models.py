# sementes/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- Pesos são persistidos em gramas inteiras (colunas ``*_g``) para que a
  conservação de peso seja exata; as propriedades ``*_kg`` expõem o valor em
  quilogramas para a camada de apresentação.
- ``from_row`` aceita ``sqlite3.Row`` ou dict com os nomes das colunas.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from sementes.domain.formulas import g_para_kg


class StatusProduto(str, Enum):
    CADASTRADO = "CADASTRADO"
    AGUARDANDO_LOCACAO = "AGUARDANDO_LOCACAO"
    LOCADO = "LOCADO"
    AGUARDANDO_RETIRADA = "AGUARDANDO_RETIRADA"
    RETIRADO = "RETIRADO"
    REMOVIDO = "REMOVIDO"


class TipoMovimentacao(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"
    TRANSFER = "transfer"
    PARTIAL_TRANSFER = "partial-transfer"
    STOCK_ADD = "stock-add"


class TipoRetirada(str, Enum):
    TOTAL = "TOTAL"
    PARCIAL = "PARCIAL"


class StatusRetirada(str, Enum):
    PENDENTE = "PENDENTE"
    CONFIRMADO = "CONFIRMADO"
    CANCELADO = "CANCELADO"


class Papel(str, Enum):
    ADMIN = "ADMIN"
    OPERATOR = "OPERATOR"


@dataclass(frozen=True)
class Ator:
    """Identidade verificada entregue pelo colaborador de autenticação."""
    id: str
    papel: Papel


@dataclass(frozen=True)
class Dimensoes:
    quadras: int
    lados: int
    filas: int
    andares: int

    @property
    def total(self) -> int:
        return self.quadras * self.lados * self.filas * self.andares


@dataclass(frozen=True)
class Coordenada:
    quadra: int
    lado: int
    fila: int
    andar: int


@dataclass
class Camara:
    """Câmara refrigerada (dado de referência)."""
    id: Optional[int]
    nome: str
    dimensoes: Dimensoes
    capacidade_padrao_g: int
    temperatura: Optional[float] = None
    umidade: Optional[float] = None

    @property
    def capacidade_padrao_kg(self) -> float:
        return g_para_kg(self.capacidade_padrao_g)

    @classmethod
    def from_row(cls, row: Any) -> "Camara":
        return cls(
            id=row["id"],
            nome=row["nome"],
            dimensoes=Dimensoes(row["quadras"], row["lados"], row["filas"], row["andares"]),
            capacidade_padrao_g=row["capacidade_padrao_g"],
            temperatura=row["temperatura"],
            umidade=row["umidade"],
        )


@dataclass
class Localizacao:
    id: int
    camara_id: int
    coordenada: Coordenada
    codigo: str
    capacidade_max_g: int
    peso_atual_g: int = 0
    ocupada: bool = False
    produto_id: Optional[int] = None
    nivel_acesso: str = "ground"

    @property
    def capacidade_max_kg(self) -> float:
        return g_para_kg(self.capacidade_max_g)

    @property
    def peso_atual_kg(self) -> float:
        return g_para_kg(self.peso_atual_g)

    @property
    def capacidade_disponivel_kg(self) -> float:
        return g_para_kg(self.capacidade_max_g - self.peso_atual_g)

    @classmethod
    def from_row(cls, row: Any) -> "Localizacao":
        return cls(
            id=row["id"],
            camara_id=row["camara_id"],
            coordenada=Coordenada(row["quadra"], row["lado"], row["fila"], row["andar"]),
            codigo=row["codigo"],
            capacidade_max_g=row["capacidade_max_g"],
            peso_atual_g=row["peso_atual_g"],
            ocupada=bool(row["ocupada"]),
            produto_id=row["produto_id"],
            nivel_acesso=row["nivel_acesso"],
        )


@dataclass
class Produto:
    id: Optional[int]
    nome: str
    lote: str
    quantidade: int
    peso_unitario_g: int
    status: StatusProduto = StatusProduto.AGUARDANDO_LOCACAO
    localizacao_id: Optional[int] = None
    tipo_semente_id: Optional[str] = None
    cliente_id: Optional[str] = None
    tipo_armazenamento: str = "saco"
    data_entrada: Optional[str] = None
    data_validade: Optional[str] = None
    observacoes: Optional[str] = None
    versao: int = 0

    @property
    def peso_total_g(self) -> int:
        return self.quantidade * self.peso_unitario_g

    @property
    def peso_unitario_kg(self) -> float:
        return g_para_kg(self.peso_unitario_g)

    @property
    def peso_total_kg(self) -> float:
        return g_para_kg(self.peso_total_g)

    @classmethod
    def from_row(cls, row: Any) -> "Produto":
        return cls(
            id=row["id"],
            nome=row["nome"],
            lote=row["lote"],
            quantidade=row["quantidade"],
            peso_unitario_g=row["peso_unitario_g"],
            status=StatusProduto(row["status"]),
            localizacao_id=row["localizacao_id"],
            tipo_semente_id=row["tipo_semente_id"],
            cliente_id=row["cliente_id"],
            tipo_armazenamento=row["tipo_armazenamento"],
            data_entrada=row["data_entrada"],
            data_validade=row["data_validade"],
            observacoes=row["observacoes"],
            versao=row["versao"],
        )


@dataclass
class Alocacao:
    """Quanto de um produto está em cada localização."""
    id: int
    produto_id: int
    localizacao_id: int
    quantidade: int

    @classmethod
    def from_row(cls, row: Any) -> "Alocacao":
        return cls(row["id"], row["produto_id"], row["localizacao_id"], row["quantidade"])


@dataclass(frozen=True)
class Movimentacao:
    """Registro imutável de um evento físico de estoque."""
    tipo: TipoMovimentacao
    produto_id: int
    ator_id: str
    quantidade: int
    peso_g: int
    motivo: str
    status_resultante: StatusProduto
    origem_id: Optional[int] = None
    destino_id: Optional[int] = None
    timestamp: Optional[str] = None
    id: Optional[int] = None

    @property
    def peso_kg(self) -> float:
        return g_para_kg(self.peso_g)

    @classmethod
    def from_row(cls, row: Any) -> "Movimentacao":
        return cls(
            id=row["id"],
            tipo=TipoMovimentacao(row["tipo"]),
            produto_id=row["produto_id"],
            ator_id=row["ator_id"],
            origem_id=row["origem_id"],
            destino_id=row["destino_id"],
            quantidade=row["quantidade"],
            peso_g=row["peso_g"],
            motivo=row["motivo"],
            status_resultante=StatusProduto(row["status_resultante"]),
            timestamp=row["timestamp"],
        )


@dataclass
class SolicitacaoRetirada:
    produto_id: int
    tipo: TipoRetirada
    solicitado_por: str
    status: StatusRetirada = StatusRetirada.PENDENTE
    quantidade_solicitada: Optional[int] = None
    motivo: Optional[str] = None
    solicitado_em: Optional[str] = None
    confirmado_por: Optional[str] = None
    confirmado_em: Optional[str] = None
    cancelado_por: Optional[str] = None
    cancelado_em: Optional[str] = None
    observacoes: Optional[str] = None
    dados_originais: Dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Any) -> "SolicitacaoRetirada":
        return cls(
            id=row["id"],
            produto_id=row["produto_id"],
            tipo=TipoRetirada(row["tipo"]),
            status=StatusRetirada(row["status"]),
            quantidade_solicitada=row["quantidade_solicitada"],
            motivo=row["motivo"],
            solicitado_por=row["solicitado_por"],
            solicitado_em=row["solicitado_em"],
            confirmado_por=row["confirmado_por"],
            confirmado_em=row["confirmado_em"],
            cancelado_por=row["cancelado_por"],
            cancelado_em=row["cancelado_em"],
            observacoes=row["observacoes"],
            dados_originais=json.loads(row["dados_originais"] or "{}"),
        )
