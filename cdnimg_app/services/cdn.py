# cdnimg_app/services/cdn.py
# -*- coding: utf-8 -*-
from __future__ import annotations

CDN_HOST = "cdn.jsdelivr.net"

def format_cdn_link(owner: str, repo: str, branch: str, path: str) -> str:
    """Link jsDelivr para um arquivo de um branch do GitHub.

    O formato precisa bater com os links já gravados no banco; nada é validado.
    """
    return f"https://{CDN_HOST}/gh/{owner}/{repo}@{branch}/{path}"
