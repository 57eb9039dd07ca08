"""Structurer: 챕터 목록 구성과 순서 관리

- append: 생성 요청을 챕터로 만들어 구간 순서(머리말 < 본문 < 맺음말)를 지키며 삽입
- reorder: 기존 id의 새 순서(드래그 결과)를 적용
- derive_page_numbers: 본문 챕터에만 1부터 이어지는 번호를 계산 (저장하지 않음)

모든 연산은 새 리스트를 반환하며 입력 리스트를 바꾸지 않는다.
"""

import uuid
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence
from ebook_chapter_processor.config.loader import StructureConfig, get_config
from ebook_chapter_processor.stages.chapter import (
    Chapter, ChapterCreationRequest, ChapterType, SEGMENT_ORDER, SubChapter
)
from ebook_chapter_processor.stages.errors import InvalidReorder
from ebook_chapter_processor.utils.logger import get_logger

logger = get_logger(__name__)

IdGenerator = Callable[[], str]


def uuid_id() -> str:
    return str(uuid.uuid4())


def derive_page_numbers(chapters: Iterable[Chapter]) -> Dict[str, int]:
    """본문 챕터 번호 계산

    목록 순서대로 훑으며 본문(chapter) 챕터에만 1, 2, 3... 을 붙인다.
    머리말/맺음말은 번호를 소비하지 않는다.

    Args:
        chapters: 현재 순서의 챕터 목록

    Returns:
        {챕터 id: 번호}
    """
    numbers: Dict[str, int] = {}
    counter = 1
    for chapter in chapters:
        if chapter.type == ChapterType.CHAPTER:
            numbers[chapter.id] = counter
            counter += 1
    return numbers


def segment_violations(chapters: Sequence[Chapter]) -> List[str]:
    """구간 순서를 깨뜨린 챕터 id (앞에 더 뒤 구간의 챕터가 있는 경우)"""
    offenders = []
    highest = 0
    for chapter in chapters:
        rank = chapter.type.rank
        if rank < highest:
            offenders.append(chapter.id)
        highest = max(highest, rank)
    return offenders


def is_segment_ordered(chapters: Sequence[Chapter]) -> bool:
    return not segment_violations(chapters)


@dataclass(frozen=True)
class NumberedChapter:
    """표시용 챕터 (본문 챕터만 page_number를 가진다)"""
    chapter: Chapter
    page_number: Optional[int] = None


@dataclass
class SegmentedView:
    """구간별로 묶은 표시용 목록"""
    front: List[NumberedChapter] = field(default_factory=list)
    body: List[NumberedChapter] = field(default_factory=list)
    back: List[NumberedChapter] = field(default_factory=list)

    def __iter__(self) -> Iterator[NumberedChapter]:
        yield from self.front
        yield from self.body
        yield from self.back


class Structurer:
    """챕터 목록 구성기"""

    def __init__(
        self,
        config: Optional[StructureConfig] = None,
        id_generator: Optional[IdGenerator] = None
    ):
        """
        Args:
            config: StructureConfig (None이면 전역 설정)
            id_generator: 고유 id 발급 함수 (None이면 uuid4)
        """
        self.config = config or get_config().structure
        self.id_generator = id_generator or uuid_id

    # 챕터 생성 ---------------------------------------------------------------
    def materialize(self, request: ChapterCreationRequest) -> Chapter:
        """생성 요청 → 챕터 (챕터 1개 + 하위 챕터마다 id 발급)"""
        chapter_id = self.id_generator()
        sub_chapters = tuple(
            SubChapter(id=self.id_generator(), title=sub.title, content=sub.content)
            for sub in request.sub_chapters
        )
        return Chapter(
            id=chapter_id,
            title=request.title,
            content=request.content,
            type=request.type,
            images=(),
            indentation=self.config.indentation,
            line_spacing=self.config.line_spacing,
            sub_chapters=sub_chapters
        )

    def create_empty_chapter(self, chapter_type: ChapterType, title: Optional[str] = None) -> Chapter:
        """빈 챕터 생성 (사용자가 직접 추가하는 경우)

        Args:
            chapter_type: 구조적 역할
            title: 제목 (None이면 구간별 기본 제목)
        """
        chapter_type = ChapterType(chapter_type)
        request = ChapterCreationRequest(
            title=title or self.config.default_titles[chapter_type.value],
            content="",
            type=chapter_type
        )
        return self.materialize(request)

    # 삽입 -------------------------------------------------------------------
    def append(
        self,
        current: Sequence[Chapter],
        created: Iterable[ChapterCreationRequest]
    ) -> List[Chapter]:
        """생성 요청을 챕터로 만들어 구간 규칙에 맞게 삽입

        - 머리말: 마지막 머리말 뒤 (없으면 맨 앞)
        - 본문: 마지막 본문 뒤 (없으면 마지막 머리말 뒤, 그것도 없으면 맨 앞)
        - 맺음말: 맨 끝
        같은 구간의 새 요청끼리는 입력 순서를 유지한다.

        Args:
            current: 현재 챕터 목록
            created: 생성 요청 (Importer 출력 또는 직접 추가)

        Returns:
            새 챕터 목록
        """
        return self.insert(current, [self.materialize(request) for request in created])

    def insert(self, current: Sequence[Chapter], chapters: Iterable[Chapter]) -> List[Chapter]:
        """이미 만들어진 챕터를 구간 규칙에 맞게 삽입

        Raises:
            ValueError: 이미 있는 id를 가진 챕터
        """
        result = list(current)
        known_ids = {chapter.id for chapter in result}
        added = 0
        for chapter in chapters:
            if chapter.id in known_ids:
                raise ValueError(f"Duplicate chapter id: {chapter.id}")
            result.insert(self._insertion_index(result, chapter.type), chapter)
            known_ids.add(chapter.id)
            added += 1

        logger.debug(f"Inserted {added} chapters ({len(result)} total)")
        return result

    def _insertion_index(self, chapters: Sequence[Chapter], chapter_type: ChapterType) -> int:
        if chapter_type == ChapterType.BACKMATTER:
            return len(chapters)

        last_front = self._last_index(chapters, ChapterType.FRONTMATTER)
        if chapter_type == ChapterType.FRONTMATTER:
            return last_front + 1 if last_front is not None else 0

        last_body = self._last_index(chapters, ChapterType.CHAPTER)
        if last_body is not None:
            return last_body + 1
        return last_front + 1 if last_front is not None else 0

    @staticmethod
    def _last_index(chapters: Sequence[Chapter], chapter_type: ChapterType) -> Optional[int]:
        for index in range(len(chapters) - 1, -1, -1):
            if chapters[index].type == chapter_type:
                return index
        return None

    # 순서 변경 ---------------------------------------------------------------
    def reorder(
        self,
        current: Sequence[Chapter],
        new_order_of_ids: Iterable[str],
        policy: Optional[str] = None
    ) -> List[Chapter]:
        """새 id 순서 적용

        정책(reorder_policy)
            verbatim  : 주어진 순서 그대로 (구간을 넘나드는 순서도 허용)
            partition : 주어진 순서를 구간별로 안정 정렬
            strict    : 구간 순서를 깨뜨리면 InvalidReorder

        Args:
            current: 현재 챕터 목록
            new_order_of_ids: 새 순서의 id
            policy: 정책 (None이면 설정값)

        Returns:
            새 챕터 목록

        Raises:
            InvalidReorder: id가 현재 목록 id의 순열이 아닐 때 (current는 그대로)
        """
        policy = policy or self.config.reorder_policy
        ids = list(new_order_of_ids)
        by_id = {chapter.id: chapter for chapter in current}

        counts = Counter(ids)
        duplicates = [i for i in dict.fromkeys(ids) if counts[i] > 1]
        unknown = [i for i in dict.fromkeys(ids) if i not in by_id]
        missing = [chapter.id for chapter in current if chapter.id not in counts]
        if duplicates or unknown or missing:
            error = InvalidReorder(missing=missing, duplicates=duplicates, unknown=unknown)
            logger.warning(f"⚠️ {error}")
            raise error

        reordered = [by_id[i] for i in ids]

        if policy == "partition":
            reordered = sorted(reordered, key=lambda c: c.type.rank)
        elif policy == "strict":
            offenders = segment_violations(reordered)
            if offenders:
                error = InvalidReorder(cross_segment=offenders)
                logger.warning(f"⚠️ {error}")
                raise error
        elif policy != "verbatim":
            raise ValueError(f"Unsupported reorder policy: {policy}")

        logger.debug(f"Reordered {len(reordered)} chapters (policy={policy})")
        return reordered

    def move(
        self,
        current: Sequence[Chapter],
        active_id: str,
        over_id: str,
        policy: Optional[str] = None
    ) -> List[Chapter]:
        """드래그 종료 처리: active 챕터를 over 챕터 자리로 이동

        Raises:
            InvalidReorder: 목록에 없는 id
        """
        ids = [chapter.id for chapter in current]
        unknown = [i for i in (active_id, over_id) if i not in ids]
        if unknown:
            raise InvalidReorder(unknown=unknown)
        if active_id == over_id:
            return list(current)

        old_index = ids.index(active_id)
        new_index = ids.index(over_id)
        ids.insert(new_index, ids.pop(old_index))
        return self.reorder(current, ids, policy=policy)

    # 표시 -------------------------------------------------------------------
    def derive_page_numbers(self, chapters: Iterable[Chapter]) -> Dict[str, int]:
        return derive_page_numbers(chapters)

    def segments(self, chapters: Sequence[Chapter]) -> SegmentedView:
        """구간별 표시 목록 (저장 순서와 무관하게 머리말 → 본문 → 맺음말)

        본문 챕터 번호는 derive_page_numbers 결과를 쓴다.
        """
        numbers = derive_page_numbers(chapters)
        view = SegmentedView()
        buckets = dict(zip(SEGMENT_ORDER, (view.front, view.body, view.back)))
        for chapter in chapters:
            buckets[chapter.type].append(NumberedChapter(chapter, numbers.get(chapter.id)))
        return view
