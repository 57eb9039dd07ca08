"""파일 소스

Importer가 읽는 파일 묶음. 각 항목은 업로드 루트 기준의 상대 경로
(슬래시 구분, 첫 구간은 루트 폴더 이름)와 본문 바이트를 제공한다.
파일 시스템, 압축 파일, 메모리 등 어디서 왔는지는 Importer가 알 필요 없다.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Protocol, Union
from ebook_chapter_processor.utils.logger import get_logger

logger = get_logger(__name__)

# 숨김/시스템 파일
IGNORED_NAMES = {".DS_Store", "Thumbs.db", "desktop.ini"}


class FileEntry(Protocol):
    """파일 묶음의 한 항목"""
    relative_path: str

    @property
    def name(self) -> str: ...

    def read_bytes(self) -> bytes: ...


def _last_segment(relative_path: str) -> str:
    return relative_path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class MemoryFileEntry:
    """메모리에 올라온 파일 (테스트, 업로드 버퍼 등)"""
    relative_path: str
    data: bytes = b""

    @property
    def name(self) -> str:
        return _last_segment(self.relative_path)

    def read_bytes(self) -> bytes:
        return self.data

    @classmethod
    def from_text(cls, relative_path: str, text: str) -> "MemoryFileEntry":
        return cls(relative_path, text.encode("utf-8"))


@dataclass(frozen=True)
class LocalFileEntry:
    """디스크의 파일"""
    path: Path
    relative_path: str

    @property
    def name(self) -> str:
        return _last_segment(self.relative_path)

    def read_bytes(self) -> bytes:
        return Path(self.path).read_bytes()


def scan_directory(root: Union[str, Path]) -> List[LocalFileEntry]:
    """폴더 재귀 스캔

    상대 경로는 루트 폴더 이름으로 시작한다
    (예: "Buku/BAB 1 - Awal/1.1 Pembuka.txt").

    Args:
        root: 업로드 루트 폴더

    Returns:
        LocalFileEntry 리스트 (경로 순 정렬)

    Raises:
        FileNotFoundError: 폴더가 없을 때
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise FileNotFoundError(f"Folder not found: {root}")

    entries = list(_walk(root_path))
    logger.info(f"✅ Scanned {root_path}: {len(entries)} files")
    return entries


def _walk(root_path: Path) -> Iterator[LocalFileEntry]:
    root_name = root_path.resolve().name
    for current, dirnames, filenames in os.walk(root_path):
        dirnames.sort()
        current_path = Path(current)
        for filename in sorted(filenames):
            if filename in IGNORED_NAMES:
                logger.debug(f"Skipped (system file): {current_path / filename}")
                continue
            file_path = current_path / filename
            relative = file_path.relative_to(root_path).as_posix()
            yield LocalFileEntry(path=file_path, relative_path=f"{root_name}/{relative}")
