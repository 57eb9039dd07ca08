"""가져오기 / 구성 에러 정의

형식이 맞지 않는 이름과 빈 챕터 폴더는 에러가 아니다 (Importer가 건너뛰고
집계한다). 호출자에게 보고되는 실패는 아래 두 가지뿐이다.
"""

from typing import Iterable, Optional, Tuple


class StructureError(Exception):
    """챕터 처리 중 발생하는 에러의 기본 클래스"""


class InvalidReorder(StructureError):
    """새 순서가 현재 목록 id의 순열이 아닐 때 발생

    Attributes:
        missing: 현재 목록에 있으나 새 순서에 없는 id
        duplicates: 새 순서에 두 번 이상 등장한 id
        unknown: 현재 목록에 없는 id
        cross_segment: strict 정책에서 구간 순서를 깨뜨린 id
    """

    def __init__(
        self,
        missing: Iterable[str] = (),
        duplicates: Iterable[str] = (),
        unknown: Iterable[str] = (),
        cross_segment: Iterable[str] = ()
    ):
        self.missing: Tuple[str, ...] = tuple(missing)
        self.duplicates: Tuple[str, ...] = tuple(duplicates)
        self.unknown: Tuple[str, ...] = tuple(unknown)
        self.cross_segment: Tuple[str, ...] = tuple(cross_segment)

        parts = []
        if self.missing:
            parts.append(f"missing={list(self.missing)}")
        if self.duplicates:
            parts.append(f"duplicates={list(self.duplicates)}")
        if self.unknown:
            parts.append(f"unknown={list(self.unknown)}")
        if self.cross_segment:
            parts.append(f"cross_segment={list(self.cross_segment)}")
        super().__init__(f"Invalid reorder: {', '.join(parts) or 'no detail'}")


class ImportIOError(StructureError):
    """파일 본문을 읽지 못했을 때 발생 (경로 포함)"""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        message = f"Failed to read file: {path}"
        if cause is not None:
            message += f" ({cause})"
        super().__init__(message)
