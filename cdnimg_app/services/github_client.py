# cdnimg_app/services/github_client.py
# -*- coding: utf-8 -*-
"""Cliente mínimo da API REST do GitHub (usuário, repositório e conteúdos).

Nenhuma chamada é repetida automaticamente: qualquer falha encerra a tentativa
atual e quem chamou decide o que mostrar ao usuário.
"""
from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote

import requests

from ..exceptions import GitHubAPIError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
ACCEPT = "application/vnd.github.v3+json"
WRITE_SCOPES = ("repo", "public_repo")
DEFAULT_AUTHOR = {"name": "CDN Image Uploader", "email": "uploader@cdn-image.local"}


@dataclass
class TokenValidation:
    valid: bool
    scopes: list[str] = field(default_factory=list)
    message: str = ""
    username: Optional[str] = None


@dataclass
class RepositoryInfo:
    exists: bool
    default_branch: str = "main"
    is_private: Optional[bool] = None


@dataclass
class RepositoryAccess:
    can_write: bool
    message: str


@dataclass
class CommitResult:
    commit_sha: str
    content_html_url: str
    content_path: str = ""
    content_sha: str = ""
    download_url: Optional[str] = None
    created: bool = True


def parse_scopes(header: Optional[str]) -> list[str]:
    # "repo, user, gist" -> ["repo", "user", "gist"]
    return [s.strip() for s in (header or "").split(",") if s.strip()]


class GitHubClient:
    def __init__(self, api_url: str = DEFAULT_API_URL, timeout: float = 30,
                 author: Optional[dict] = None):
        self.api_url = (api_url or DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout
        self.author = dict(author or DEFAULT_AUTHOR)

    @classmethod
    def from_config(cls, config) -> "GitHubClient":
        return cls(
            api_url=config.get("GITHUB_API_URL", DEFAULT_API_URL),
            timeout=config.get("GITHUB_TIMEOUT", 30),
            author={
                "name": config.get("COMMIT_AUTHOR_NAME", DEFAULT_AUTHOR["name"]),
                "email": config.get("COMMIT_AUTHOR_EMAIL", DEFAULT_AUTHOR["email"]),
            },
        )

    def _headers(self, token: str) -> dict:
        return {"Authorization": f"token {token.strip()}", "Accept": ACCEPT}

    def _repo_url(self, owner: str, repo: str) -> str:
        return f"{self.api_url}/repos/{owner}/{repo}"

    def _contents_url(self, owner: str, repo: str, path: str) -> str:
        return f"{self._repo_url(owner, repo)}/contents/{quote(path.lstrip('/'))}"

    # ------------------------------------------------------------------ token
    def validate_token(self, token: str) -> TokenValidation:
        try:
            r = requests.get(f"{self.api_url}/user", headers=self._headers(token), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Falha ao validar token no GitHub: %s", e)
            return TokenValidation(valid=False, message="Erro ao validar token")

        if not r.ok:
            return TokenValidation(valid=False, message="Token inválido ou expirado")

        try:
            username = (r.json() or {}).get("login")
        except ValueError:
            username = None
        scopes = parse_scopes(r.headers.get("X-OAuth-Scopes"))

        if not any(s in scopes for s in WRITE_SCOPES):
            return TokenValidation(
                valid=False,
                scopes=scopes,
                message="Token não tem permissão de escrita em repositórios. Crie um novo token com escopo 'repo'",
                username=username,
            )
        return TokenValidation(valid=True, scopes=scopes, message="Token validado com sucesso", username=username)

    # ------------------------------------------------------------ repositório
    def _get_repository(self, token: str, owner: str, repo: str):
        return requests.get(self._repo_url(owner, repo), headers=self._headers(token), timeout=self.timeout)

    def get_repository_info(self, token: str, owner: str, repo: str) -> RepositoryInfo:
        try:
            r = self._get_repository(token, owner, repo)
            if not r.ok:
                return RepositoryInfo(exists=False)
            data = r.json() or {}
        except (requests.RequestException, ValueError) as e:
            logger.warning("Falha ao consultar %s/%s: %s", owner, repo, e)
            return RepositoryInfo(exists=False)
        return RepositoryInfo(
            exists=True,
            default_branch=data.get("default_branch") or "main",
            is_private=data.get("private"),
        )

    def test_repository_access(self, token: str, owner: str, repo: str) -> RepositoryAccess:
        try:
            r = self._get_repository(token, owner, repo)
            if not r.ok:
                return RepositoryAccess(False, "Repositório não encontrado ou sem acesso")
            data = r.json() or {}
        except (requests.RequestException, ValueError) as e:
            logger.warning("Falha ao verificar acesso a %s/%s: %s", owner, repo, e)
            return RepositoryAccess(False, "Erro ao verificar acesso")

        # sem o bloco "permissions" não dá para afirmar que falta acesso
        if (data.get("permissions") or {}).get("push") is False:
            return RepositoryAccess(False, "Sem permissão de escrita neste repositório")
        return RepositoryAccess(True, "Acesso de escrita confirmado")

    # -------------------------------------------------------------- conteúdos
    def get_file_sha(self, token: str, owner: str, repo: str, path: str,
                     branch: Optional[str] = None) -> Optional[str]:
        """SHA atual do arquivo, ou None se ele ainda não existe."""
        params = {"ref": branch} if branch else None
        try:
            r = requests.get(self._contents_url(owner, repo, path), headers=self._headers(token),
                             params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.info("Consulta de SHA falhou para %s (%s); tratando como arquivo novo", path, e)
            return None
        if r.status_code != 200:
            return None
        try:
            data = r.json()
        except ValueError:
            return None
        # um diretório devolve lista, não há SHA de arquivo
        return data.get("sha") if isinstance(data, dict) else None

    def commit_file(self, token: str, owner: str, repo: str, path: str, message: str,
                    content: bytes | str, branch: str = "main", author: Optional[dict] = None,
                    sha: Optional[str] = None) -> CommitResult:
        """Cria ou atualiza um arquivo (upsert).

        `sha` é a pré-condição de concorrência otimista exigida pela API para
        atualizar um arquivo existente. Se não for informado, é consultado antes
        do PUT; se o arquivo não existir o PUT cria o arquivo.
        """
        if sha is None:
            sha = self.get_file_sha(token, owner, repo, path, branch=branch)

        raw = content.encode("utf-8") if isinstance(content, str) else content
        who = dict(author or self.author)
        payload = {
            "message": message,
            "content": base64.b64encode(raw).decode("ascii"),
            "branch": branch,
            "author": who,
            "committer": who,
        }
        if sha:
            payload["sha"] = sha

        url = self._contents_url(owner, repo, path)
        try:
            r = requests.put(url, headers=self._headers(token), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise GitHubAPIError(f"GitHub API error: {e}") from e

        if r.status_code not in (200, 201):
            try:
                upstream = (r.json() or {}).get("message")
            except ValueError:
                upstream = None
            msg = upstream or getattr(r, "reason", None) or f"HTTP {r.status_code}"
            logger.warning("PUT %s recusado (%s): %s", path, r.status_code, msg)
            raise GitHubAPIError(f"GitHub API error: {msg}", status_code=r.status_code)

        data = r.json() or {}
        commit = data.get("commit") or {}
        info = data.get("content") or {}
        return CommitResult(
            commit_sha=commit.get("sha", ""),
            content_html_url=info.get("html_url", ""),
            content_path=info.get("path", path),
            content_sha=info.get("sha", ""),
            download_url=info.get("download_url"),
            created=r.status_code == 201,
        )
