# cdnimg_app/services/dashboard.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import pandas as pd

_UNITS = ["B", "KB", "MB", "GB"]

def human_bytes(b) -> str:
    b = int(b or 0)
    if b <= 0:
        return "0 B"
    i = 0
    while i < len(_UNITS) - 1 and b >= 1024 ** (i + 1):
        i += 1
    value = round(b / (1024 ** i), 2)
    txt = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{txt} {_UNITS[i]}"

def _frame(uploads) -> pd.DataFrame:
    rows = [{
        "uploaded_at": u.uploaded_at,
        "file_size": int(u.file_size or 0),
        "mime_type": u.mime_type or "",
    } for u in uploads]
    return pd.DataFrame(rows, columns=["uploaded_at", "file_size", "mime_type"])

def build_dashboard(uploads) -> dict:
    """Agrega os uploads por dia e por tipo para os gráficos do dashboard."""
    df = _frame(uploads)
    if df.empty:
        return {"daily": [], "types": [], "last_upload_at": None,
                "total_uploads": 0, "total_size": 0}

    df["day"] = pd.to_datetime(df["uploaded_at"]).dt.normalize()
    daily = (df.groupby("day", sort=True)
               .agg(count=("file_size", "size"), size=("file_size", "sum"))
               .reset_index())

    # "image/svg+xml" -> "svg+xml"; sem subtipo vira "outro"
    df["type"] = df["mime_type"].map(lambda m: (m.split("/", 1)[1] if "/" in m else "") or "outro")
    types = df.groupby("type", sort=False).size().reset_index(name="count")

    return {
        "daily": [
            {"date": r["day"].strftime("%d/%m/%Y"), "count": int(r["count"]), "size": int(r["size"]),
             "size_human": human_bytes(r["size"])}
            for r in daily.to_dict("records")
        ],
        "types": [{"type": r["type"], "count": int(r["count"])} for r in types.to_dict("records")],
        "last_upload_at": pd.to_datetime(df["uploaded_at"]).max().to_pydatetime(),
        "total_uploads": int(len(df)),
        "total_size": int(df["file_size"].sum()),
    }
