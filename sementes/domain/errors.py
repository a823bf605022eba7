"""
Erros tipados do domínio.

Toda falha de regra de negócio é um ``BusinessRuleError`` com um ``code``
estável (para tratamento programático) e uma mensagem legível. Falhas de
infraestrutura (banco indisponível, disco cheio...) são ``InfrastructureError``
e não se confundem com resultados de negócio.

Uso:
    try:
        run_localizar(produto_id, localizacao_id, ator)
    except LocationOccupiedError as e:
        print(e.code, e.message, e.data)
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SementesError(Exception):
    """Base de todos os erros do sistema."""

    code = "ERRO"
    default_message = "Erro no sistema de armazenagem"

    def __init__(self, message: Optional[str] = None, **data: Any):
        self.message = message or self.default_message
        self.data: Dict[str, Any] = data
        super().__init__(self.message)

    def as_dict(self) -> Dict[str, Any]:
        """Serializa para dict (útil para CLI/API)."""
        return {"code": self.code, "message": self.message, "data": dict(self.data)}


class BusinessRuleError(SementesError):
    code = "BUSINESS_RULE"
    default_message = "Violação de regra de negócio"


class ValidationError(BusinessRuleError):
    code = "VALIDATION"
    default_message = "Dados inválidos"


class DimensionError(ValidationError):
    code = "DIMENSION"
    default_message = "Dimensões da câmara inválidas"


class NotFoundError(BusinessRuleError):
    code = "NOT_FOUND"
    default_message = "Registro não encontrado"


class InvalidStateTransitionError(BusinessRuleError):
    code = "INVALID_TRANSITION"
    default_message = "Transição de estado inválida"


class LocationOccupiedError(BusinessRuleError):
    code = "LOCATION_OCCUPIED"
    default_message = "Localização já ocupada"


class CapacityExceededError(BusinessRuleError):
    code = "CAPACITY_EXCEEDED"
    default_message = "Capacidade da localização excedida"


class UnauthorizedTransitionError(BusinessRuleError):
    code = "UNAUTHORIZED"
    default_message = "Papel sem autoridade para esta operação"


class ConflictError(BusinessRuleError):
    code = "CONFLICT"
    default_message = "Modificação concorrente detectada"


class InfrastructureError(SementesError):
    code = "INFRA"
    default_message = "Falha de infraestrutura"
