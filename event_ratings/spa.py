"""
Static file serving for the single-page app build.

Any GET outside the API namespace returns the matching file from the build
directory, or ``index.html`` so the client-side router can take over.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import FileResponse

from event_ratings.errors import NotFound

INDEX_FILE = "index.html"


def _resolve_static_file(root: Path, path: str) -> Path | None:
    if not path:
        return None
    try:
        candidate = (root / path).resolve()
        if not candidate.is_relative_to(root) or not candidate.is_file():
            return None
    except (OSError, ValueError):
        # Names the filesystem cannot represent (too long, NUL bytes).
        return None
    return candidate


def register_spa_routes(app: FastAPI, static_dir: str, api_prefix: str) -> None:
    root = Path(static_dir).resolve()
    api_namespace = api_prefix.strip("/") + "/"

    @app.get("/{full_path:path}", include_in_schema=False)
    def serve_spa(full_path: str):
        if full_path.startswith(api_namespace):
            raise NotFound(f"Cannot GET /{full_path}")
        static_file = _resolve_static_file(root, full_path)
        if static_file is not None:
            return FileResponse(static_file)
        index = root / INDEX_FILE
        if not index.is_file():
            raise NotFound(f"{INDEX_FILE} not found in {static_dir}")
        return FileResponse(index)
