# cdnimg_app/exceptions.py
# -*- coding: utf-8 -*-
from __future__ import annotations


class UploaderError(Exception):
    """Base de todos os erros do fluxo de upload."""


class ValidationError(UploaderError):
    """Entrada inválida detectada antes de qualquer chamada de rede."""


class AuthenticationError(UploaderError):
    """Token inválido, expirado ou sem escopo de escrita."""


class RepositoryAccessError(UploaderError):
    """Repositório inexistente ou sem permissão de escrita."""


class GitHubAPIError(UploaderError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
