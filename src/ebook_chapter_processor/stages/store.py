"""챕터 저장소 (메모리)

외부 저장소가 구현해야 할 좁은 인터페이스(get / append / reorder)의 참조 구현.
변경은 Structurer가 새 목록을 만든 뒤에만 반영되므로, 실패한 변경은
저장된 목록을 건드리지 않는다. 영속화는 다루지 않는다.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from ebook_chapter_processor.stages.chapter import Chapter, ChapterCreationRequest, ImportResult
from ebook_chapter_processor.stages.file_source import FileEntry
from ebook_chapter_processor.stages.importer import Importer
from ebook_chapter_processor.stages.structurer import SegmentedView, Structurer
from ebook_chapter_processor.utils.logger import get_logger

logger = get_logger(__name__)


class ChapterStore:
    """챕터 목록 보관소"""

    def __init__(
        self,
        structurer: Optional[Structurer] = None,
        importer: Optional[Importer] = None,
        chapters: Iterable[Chapter] = ()
    ):
        """
        Args:
            structurer: Structurer 인스턴스 (None이면 기본 설정)
            importer: Importer 인스턴스 (None이면 기본 설정)
            chapters: 초기 챕터 (구간 규칙에 맞게 삽입됨)
        """
        self.structurer = structurer or Structurer()
        self.importer = importer or Importer()
        self._chapters: List[Chapter] = self.structurer.insert([], chapters)

    @property
    def chapters(self) -> List[Chapter]:
        """현재 목록 (복사본)"""
        return list(self._chapters)

    def __len__(self) -> int:
        return len(self._chapters)

    def get(self, chapter_id: str) -> Chapter:
        for chapter in self._chapters:
            if chapter.id == chapter_id:
                return chapter
        raise KeyError(chapter_id)

    def add_chapter(self, chapter: Chapter) -> None:
        self._chapters = self.structurer.insert(self._chapters, [chapter])

    def add_requests(self, requests: Iterable[ChapterCreationRequest]) -> List[Chapter]:
        """생성 요청 반영

        Returns:
            새로 만들어진 챕터 (목록 순서)
        """
        before = {chapter.id for chapter in self._chapters}
        self._chapters = self.structurer.append(self._chapters, requests)
        return [chapter for chapter in self._chapters if chapter.id not in before]

    def add_empty_chapter(self, chapter_type, title: Optional[str] = None) -> Chapter:
        chapter = self.structurer.create_empty_chapter(chapter_type, title)
        self.add_chapter(chapter)
        return chapter

    def reorder_chapters(self, chapters: Sequence[Chapter]) -> None:
        """챕터 객체 순서로 재정렬 (id 순열 검증 포함)"""
        self.reorder_ids([chapter.id for chapter in chapters])

    def reorder_ids(self, ids: Iterable[str]) -> None:
        self._chapters = self.structurer.reorder(self._chapters, ids)

    def move(self, active_id: str, over_id: str) -> None:
        self._chapters = self.structurer.move(self._chapters, active_id, over_id)

    def remove_chapter(self, chapter_id: str) -> Chapter:
        """챕터 삭제

        Raises:
            KeyError: 없는 id
        """
        chapter = self.get(chapter_id)
        self._chapters = [c for c in self._chapters if c.id != chapter_id]
        logger.debug(f"Removed chapter: {chapter.title}")
        return chapter

    def page_numbers(self) -> Dict[str, int]:
        return self.structurer.derive_page_numbers(self._chapters)

    def segments(self) -> SegmentedView:
        return self.structurer.segments(self._chapters)

    def import_files(self, files: Iterable[FileEntry]) -> ImportResult:
        """파일 묶음 가져오기 → 목록에 반영

        읽기 실패로 ImportIOError가 나면 목록은 바뀌지 않는다.
        """
        result = self.importer.import_batch(files)
        self.add_requests(result.created)
        logger.info(f"✅ Store now holds {len(self._chapters)} chapters")
        return result
