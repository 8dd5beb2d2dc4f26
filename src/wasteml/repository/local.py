"""Local filesystem implementation of FileRepositoryProtocol."""

from pathlib import Path
from typing import Union


class LocalFileRepository:
    """Implementation of FileRepositoryProtocol using local filesystem."""

    def exists(self, path: Union[str, Path]) -> bool:
        return Path(path).exists()

    def is_file(self, path: Union[str, Path]) -> bool:
        return Path(path).is_file()

    def is_dir(self, path: Union[str, Path]) -> bool:
        return Path(path).is_dir()

    def get_size(self, path: Union[str, Path]) -> int:
        return Path(path).stat().st_size
