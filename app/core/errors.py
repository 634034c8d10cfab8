"""
StockEasy - Domain Errors
Erros de dominio levantados pelos services e convertidos em respostas HTTP
pelos handlers registrados em app.main
"""
from typing import Optional


class StockEasyError(Exception):
    """Erro base de dominio"""
    kind = "error"
    status_code = 400

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail()
        super().__init__(self.detail)

    def default_detail(self) -> str:
        return self.kind.replace("_", " ").capitalize()

    def to_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.detail}


class Unauthenticated(StockEasyError):
    """Credencial ausente, invalida ou sem usuario correspondente"""
    kind = "unauthenticated"
    status_code = 401


class Forbidden(StockEasyError):
    """Principal autenticado sem permissao para a operacao"""
    kind = "forbidden"
    status_code = 403


class NotFound(StockEasyError):
    """Registro inexistente ou fora do escopo do principal"""
    kind = "not_found"
    status_code = 404


class ValidationError(StockEasyError):
    """Campos ausentes ou invalidos"""
    kind = "validation_error"
    status_code = 400


class ConflictError(StockEasyError):
    """Operacao incompativel com o estado atual do registro"""
    kind = "conflict"
    status_code = 409


class ReferentialError(StockEasyError):
    """Chave estrangeira apontando para registro inexistente ou de outra empresa"""
    kind = "referential_error"
    status_code = 422


class UpstreamError(StockEasyError):
    """Banco de dados indisponivel ou rejeitou a consulta"""
    kind = "upstream_error"
    status_code = 503
