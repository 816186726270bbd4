"""Erros expostos pelos futures do cliente da API."""


class VimeoScopeError(Exception):
    pass


class TransportError(VimeoScopeError):
    """Falha de rede/conexão ou transporte parado."""


class DecompressionError(VimeoScopeError):
    """Corpo da resposta não é gzip válido."""


class ParseError(VimeoScopeError):
    """Corpo da resposta não é JSON válido."""


class ApiError(VimeoScopeError):
    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.message = message
        self.status = status


class CancellationAbort(VimeoScopeError):
    """Operação abortada pela flag de cancelamento cooperativo."""
