# cdnimg_app/services/workflow.py
# -*- coding: utf-8 -*-
"""Fluxo completo de um upload: valida, commita no GitHub, gera o link CDN e registra."""
from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass
from typing import Optional

from werkzeug.utils import secure_filename

from ..exceptions import AuthenticationError, RepositoryAccessError, ValidationError
from ..models import Upload
from .cdn import format_cdn_link
from .github_client import GitHubClient
from .uploads import create_upload
from .validation import ALLOWED_MIME_TYPES, MAX_FILE_SIZE, validate_image

# chaves da sessão onde a configuração do GitHub fica guardada
SESSION_KEYS = ("github_token", "github_owner", "github_repo", "github_branch")
EXT_RE = re.compile(r"\.[a-z0-9]{1,10}")


@dataclass(frozen=True)
class GitHubSettings:
    token: str = ""
    owner: str = ""
    repo: str = ""
    branch: str = "main"

    @classmethod
    def from_session(cls, session, default_owner: str = "", default_repo: str = "",
                     default_branch: str = "main") -> "GitHubSettings":
        return cls(
            token=session.get("github_token") or "",
            owner=session.get("github_owner") or default_owner,
            repo=session.get("github_repo") or default_repo,
            branch=session.get("github_branch") or default_branch,
        )

    def save(self, session) -> None:
        session["github_token"] = self.token
        session["github_owner"] = self.owner
        session["github_repo"] = self.repo
        session["github_branch"] = self.branch

    @staticmethod
    def clear(session) -> None:
        for k in SESSION_KEYS:
            session.pop(k, None)

    @property
    def missing(self) -> list[str]:
        return [name for name in ("token", "owner", "repo") if not getattr(self, name).strip()]

    @property
    def masked_token(self) -> str:
        t = self.token
        return f"{t[:4]}…{t[-4:]}" if len(t) > 8 else ("•" * len(t))


def verify_settings(client: GitHubClient, token: str, owner: str, repo: str) -> GitHubSettings:
    """Confere token e repositório e devolve a configuração pronta para uso.

    O branch gravado é o branch padrão do repositório.
    """
    token, owner, repo = (token or "").strip(), (owner or "").strip(), (repo or "").strip()
    if not token:
        raise ValidationError("Informe o token do GitHub.")
    if not owner or not repo:
        raise ValidationError("Informe o dono e o nome do repositório.")

    tv = client.validate_token(token)
    if not tv.valid:
        raise AuthenticationError(tv.message)

    access = client.test_repository_access(token, owner, repo)
    if not access.can_write:
        raise RepositoryAccessError(f"{access.message}: {owner}/{repo}")

    info = client.get_repository_info(token, owner, repo)
    return GitHubSettings(token=token, owner=owner, repo=repo, branch=info.default_branch)


@dataclass
class UploadOutcome:
    upload: Upload
    cdn_link: str
    github_url: str


def storage_name(original: str, now_ms: Optional[int] = None) -> str:
    """Nome no repositório: <epoch ms>-<nome seguro>, sem colisão entre envios."""
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    stem, ext = os.path.splitext(original or "")
    ext = ext.lower() if EXT_RE.fullmatch(ext.lower()) else ""
    # secure_filename descarta tudo que não é ASCII; a extensão é reanexada
    safe = secure_filename(stem) or "imagem"
    return f"{ms}-{safe}{ext}"


class UploadWorkflow:
    def __init__(self, client: GitHubClient, settings: GitHubSettings, path_prefix: str = "images",
                 max_bytes: int = MAX_FILE_SIZE, allowed_mime_types=ALLOWED_MIME_TYPES):
        self.client = client
        self.settings = settings
        self.path_prefix = (path_prefix or "").strip("/")
        self.max_bytes = max_bytes
        self.allowed_mime_types = frozenset(allowed_mime_types)

    def _path_for(self, name: str) -> str:
        return f"{self.path_prefix}/{name}" if self.path_prefix else name

    def run(self, user_id: int, original_filename: str, mime_type: str, content: bytes) -> UploadOutcome:
        missing = self.settings.missing
        if missing:
            raise ValidationError("Configure token, dono e repositório do GitHub antes de enviar "
                                  f"(faltando: {', '.join(missing)}).")
        if not original_filename:
            raise ValidationError("Selecione uma imagem.")

        ok, err = validate_image(mime_type, len(content), allowed=self.allowed_mime_types, max_size=self.max_bytes)
        if not ok:
            raise ValidationError(err)

        s = self.settings
        name = storage_name(original_filename)
        path = self._path_for(name)

        result = self.client.commit_file(
            s.token, s.owner, s.repo, path,
            message=f"Upload de imagem: {original_filename}",
            content=content,
            branch=s.branch,
        )

        cdn_link = format_cdn_link(s.owner, s.repo, s.branch, path)
        rec = create_upload(
            user_id,
            filename=name,
            original_filename=original_filename,
            file_size=len(content),
            mime_type=mime_type,
            github_url=result.content_html_url,
            cdn_link=cdn_link,
        )
        return UploadOutcome(upload=rec, cdn_link=cdn_link, github_url=result.content_html_url)
