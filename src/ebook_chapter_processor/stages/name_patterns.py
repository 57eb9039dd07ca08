"""폴더/파일 이름 패턴 매처

업로드된 폴더 구조의 이름 규칙을 해석한다.
- 챕터 폴더: "BAB 3 - Awal"            → Matched(number="3", title="Awal")
- 하위 챕터 파일: "3.1 Pembuka.txt"     → Matched(number="3.1", title="Pembuka")
- 머리말/맺음말 파일: 이름에 표지어 포함 ("Kata Pengantar", "Penutup")

문법은 설정(config.yml)의 정규식으로 바꿀 수 있고, 그룹핑/정렬 로직은
매칭 결과(Matched / Unmatched)만 본다.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union
from ebook_chapter_processor.config.loader import ImportingConfig
from ebook_chapter_processor.stages.chapter import ChapterType
from ebook_chapter_processor.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Matched:
    """이름 매칭 성공

    Attributes:
        number: 이름에서 읽은 번호 문자열 (예: "3", "3.1")
        title: 이름에서 읽은 제목
    """
    number: str
    title: str

    @property
    def sort_key(self) -> Tuple[int, ...]:
        """숫자 정렬 키 ("3.10" → (3, 10))"""
        return tuple(int(part) for part in self.number.split("."))


@dataclass(frozen=True)
class Unmatched:
    """이름 매칭 실패"""
    name: str
    reason: str


NameMatch = Union[Matched, Unmatched]

NUMBER_RE = re.compile(r"\d+(?:\.\d+)*")


def _matched(name: str, match: "re.Match[str]") -> NameMatch:
    number, title = match.group(1), match.group(2).strip()
    if not NUMBER_RE.fullmatch(number):
        return Unmatched(name, f"number group is not numeric: {number}")
    if not title:
        return Unmatched(name, "empty title")
    return Matched(number=number, title=title)


def _compile(pattern: str, label: str) -> "re.Pattern[str]":
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid {label} pattern: {e}")
    if compiled.groups < 2:
        raise ValueError(f"{label} pattern needs two groups (number, title): {pattern}")
    return compiled


class NamePatterns:
    """폴더/파일 이름 규칙 해석기

    기본 패턴은 ^로 고정되어 있어 앞에 번호 등이 붙은 이름은 일부러 거부한다.
    """

    def __init__(self, config: Optional[ImportingConfig] = None):
        """
        Args:
            config: ImportingConfig (None이면 기본값)
        """
        config = config or ImportingConfig()
        self.chapter_folder_re = _compile(config.chapter_folder_pattern, "chapter folder")
        self.subchapter_file_re = _compile(config.subchapter_file_pattern, "sub-chapter file")
        self.frontmatter_marker = config.frontmatter_marker.lower()
        self.backmatter_marker = config.backmatter_marker.lower()

    def match_chapter_folder(self, name: str) -> NameMatch:
        """챕터 폴더 이름 해석

        Args:
            name: 폴더 이름 (예: "BAB 3 - Awal")

        Returns:
            Matched 또는 Unmatched
        """
        match = self.chapter_folder_re.search(name)
        if not match:
            return Unmatched(name, "not a chapter folder name")
        return _matched(name, match)

    def match_subchapter_file(self, name: str) -> NameMatch:
        """하위 챕터 파일 이름 해석

        Args:
            name: 파일 이름 (예: "3.1 Pembuka.txt")

        Returns:
            Matched 또는 Unmatched
        """
        match = self.subchapter_file_re.search(name)
        if not match:
            return Unmatched(name, "not a sub-chapter file name")
        return _matched(name, match)

    def is_frontmatter(self, name: str) -> bool:
        return self.frontmatter_marker in name.lower()

    def is_backmatter(self, name: str) -> bool:
        return self.backmatter_marker in name.lower()

    def segment_of(self, name: str) -> Optional[ChapterType]:
        """표지어로 판단한 구간 (없으면 None)"""
        if self.is_frontmatter(name):
            return ChapterType.FRONTMATTER
        if self.is_backmatter(name):
            return ChapterType.BACKMATTER
        return None
