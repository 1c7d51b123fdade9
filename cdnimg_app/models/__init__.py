# cdnimg_app/models/__init__.py
# -*- coding: utf-8 -*-
from .user import User
from .upload import Upload, UploadStats


__all__ = [
    "User",
    "Upload",
    "UploadStats",
]
