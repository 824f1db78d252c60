from typing import Iterable, List, Optional


class StorageProvider:
    """
    Bucketed file store.

    Paths are relative to a bucket ("deliverables/<id>/<filename>"). Any
    failure is raised as RemoteOperationFailed.
    """

    def put(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        raise NotImplementedError

    def get_public_url(self, bucket: str, path: str) -> str:
        raise NotImplementedError

    def exists(self, bucket: str, path: str) -> bool:
        raise NotImplementedError

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        raise NotImplementedError

    def list_paths(self, bucket: str, prefix: str) -> List[str]:
        raise NotImplementedError
