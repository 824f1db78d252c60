"""
Local filesystem storage provider.
Saves files under STORAGE_DIR/<bucket>/<path>; the application serves them
at /storage/<bucket>/<path>.
"""
from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import quote

import structlog

from datenova.core.config import settings
from datenova.core.errors import RemoteOperationFailed
from datenova.storage.provider import StorageProvider

logger = structlog.get_logger(__name__)


class LocalStorageProvider(StorageProvider):

    def __init__(self, base_dir: Optional[str] = None, public_base_url: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.STORAGE_DIR)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def local_path(self, bucket: str, path: str) -> Path:
        """Filesystem path for a key; keys may not escape their bucket."""
        root = (self.base_dir / bucket).resolve()
        clean_key = path.lstrip("/").replace("\\", "/")
        target = (root / clean_key).resolve()
        if root not in target.parents:
            raise RemoteOperationFailed(f"Ruta de archivo no válida: {path}")
        return target

    def put(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        target = self.local_path(bucket, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.error("storage_put_failed", bucket=bucket, path=path, error=str(exc))
            raise RemoteOperationFailed(f"No se pudo subir el archivo: {exc}") from exc
        logger.info("storage_put", bucket=bucket, path=path, size=len(data), content_type=content_type)

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{quote(path.lstrip('/'))}"

    def exists(self, bucket: str, path: str) -> bool:
        return self.local_path(bucket, path).is_file()

    def list_paths(self, bucket: str, prefix: str) -> List[str]:
        """Every stored path below `prefix`, relative to the bucket."""
        root = (self.base_dir / bucket).resolve()
        folder = self.local_path(bucket, prefix)
        if not folder.is_dir():
            return []
        return sorted(p.relative_to(root).as_posix() for p in folder.rglob("*") if p.is_file())

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        for path in paths:
            target = self.local_path(bucket, path)
            try:
                target.unlink(missing_ok=True)
            except OSError as exc:
                logger.error("storage_remove_failed", bucket=bucket, path=path, error=str(exc))
                raise RemoteOperationFailed(f"No se pudo eliminar el archivo: {exc}") from exc


def get_storage() -> StorageProvider:
    """FastAPI dependency returning the configured storage provider."""
    return LocalStorageProvider()
