"""챕터 데이터 구조

책을 구성하는 챕터(머리말/본문/맺음말)와 하위 챕터를 나타내는 데이터 클래스.
쪽 번호(page number)는 저장하지 않고 목록 순서에서 매번 계산한다
(`structurer.derive_page_numbers` 참고).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ChapterType(str, Enum):
    """챕터의 구조적 역할 (구간)"""
    FRONTMATTER = "frontmatter"
    CHAPTER = "chapter"
    BACKMATTER = "backmatter"

    @property
    def rank(self) -> int:
        """구간 순서: 머리말 < 본문 < 맺음말"""
        return SEGMENT_ORDER.index(self)


SEGMENT_ORDER = (ChapterType.FRONTMATTER, ChapterType.CHAPTER, ChapterType.BACKMATTER)

DEFAULT_INDENTATION = 0
DEFAULT_LINE_SPACING = 1.5


@dataclass(frozen=True)
class SubChapter:
    """본문 챕터 아래의 하위 챕터 (읽는 순서대로 저장)"""
    id: str
    title: str
    content: str


@dataclass(frozen=True)
class Chapter:
    """책의 한 챕터

    Attributes:
        id: 생성 시 발급되는 고유 id (변경 불가)
        title: 표시 제목
        content: 본문 (하위 챕터만 가진 컨테이너 챕터는 빈 문자열)
        type: 구조적 역할, 생성 후 변경되지 않음
        images: 이미지 참조 (가져오기 시점에는 비어 있음)
        indentation: 들여쓰기 (표시 속성)
        line_spacing: 줄 간격 (표시 속성)
        sub_chapters: 하위 챕터 (순서 유지)
    """
    id: str
    title: str
    content: str
    type: ChapterType
    images: Tuple[str, ...] = ()
    indentation: int = DEFAULT_INDENTATION
    line_spacing: float = DEFAULT_LINE_SPACING
    sub_chapters: Tuple[SubChapter, ...] = ()

    def to_dict(self, page_number: Optional[int] = None) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "images": list(self.images),
            "type": self.type.value,
            "indentation": self.indentation,
            "lineSpacing": self.line_spacing,
            "subChapters": [
                {"id": sub.id, "title": sub.title, "content": sub.content}
                for sub in self.sub_chapters
            ],
        }
        if page_number is not None:
            data["pageNumber"] = page_number
        return data

    def __repr__(self):
        return (
            f"<Chapter {self.id[:8]}: {self.title} "
            f"(type={self.type.value}, {len(self.sub_chapters)} sub-chapters)>"
        )


@dataclass(frozen=True)
class SubChapterRequest:
    """하위 챕터 생성 요청 (id 발급 전)"""
    title: str
    content: str


@dataclass(frozen=True)
class ChapterCreationRequest:
    """챕터 생성 요청

    Importer의 출력. id 발급과 목록 삽입은 Structurer가 담당한다.

    Attributes:
        title: 챕터 제목
        content: 본문
        type: 구조적 역할
        sub_chapters: 하위 챕터 요청 (순서 유지)
        number: 폴더 이름에서 읽은 원본 장 번호 (본문 챕터만, 정렬 키)
    """
    title: str
    content: str
    type: ChapterType
    sub_chapters: Tuple[SubChapterRequest, ...] = ()
    number: Optional[int] = None


@dataclass
class ImportResult:
    """import_batch 결과"""
    created: List[ChapterCreationRequest] = field(default_factory=list)
    skipped: int = 0
    skipped_paths: List[str] = field(default_factory=list)

    def count(self, chapter_type: ChapterType) -> int:
        return sum(1 for request in self.created if request.type == chapter_type)
