# cdnimg_app/services/validation.py
# -*- coding: utf-8 -*-
from __future__ import annotations

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
})
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

def too_large_message(max_size: int = MAX_FILE_SIZE) -> str:
    return f"Arquivo muito grande. Máximo: {max_size // (1024 * 1024)}MB"

def validate_image(mime_type: str, size: int,
                   allowed: frozenset[str] = ALLOWED_MIME_TYPES,
                   max_size: int = MAX_FILE_SIZE) -> tuple[bool, str]:
    """Checagem feita antes de qualquer chamada ao GitHub."""
    if (mime_type or "").lower() not in allowed:
        return False, "Formato de arquivo não suportado. Use: JPG, PNG, GIF, WebP ou SVG"
    if size is None or size < 0:
        return False, "Tamanho de arquivo inválido."
    if size > max_size:
        return False, too_large_message(max_size)
    return True, ""
