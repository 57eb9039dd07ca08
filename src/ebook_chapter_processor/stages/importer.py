"""Importer: 업로드 파일 묶음 → 챕터 생성 요청

폴더 구조 규칙
    <루트>/Kata Pengantar.txt              → 머리말 (이름에 표지어)
    <루트>/BAB 1 - Awal/1.1 Pembuka.txt    → 본문 챕터 "Awal"의 하위 챕터 "Pembuka"
    <루트>/BAB 1 - Awal/1.2 Lanjutan.txt
    <루트>/Penutup.txt                     → 맺음말

처리 순서
1. 표지어로 머리말/맺음말 파일 찾기 (폴더와 무관)
2. 두 번째 경로 구간(루트 바로 아래 폴더)으로 그룹핑
3. 폴더 이름 해석 ("BAB <번호> - <제목>"), 실패한 폴더의 파일은 건너뜀
4. 폴더 안의 파일을 이름순 정렬 후 하위 챕터 이름 해석, 유효한 하위 챕터가
   없는 폴더는 통째로 버림
5. 필요한 파일만 병렬로 읽기 (ThreadPoolExecutor)
6. 머리말 → 본문(장 번호 오름차순) → 맺음말 순으로 출력
"""

from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple
from ebook_chapter_processor.config.loader import ImportingConfig, get_config
from ebook_chapter_processor.stages.chapter import (
    ChapterCreationRequest, ChapterType, ImportResult, SubChapterRequest
)
from ebook_chapter_processor.stages.errors import ImportIOError
from ebook_chapter_processor.stages.file_source import FileEntry
from ebook_chapter_processor.stages.name_patterns import Matched, NamePatterns, Unmatched
from ebook_chapter_processor.utils.logger import get_logger
from ebook_chapter_processor.utils.text_decoder import decode_text

logger = get_logger(__name__)


@dataclass
class _ChapterGroup:
    """해석된 챕터 폴더와 그 안의 유효한 하위 챕터 파일"""
    folder: Matched
    encounter: int
    members: List[Tuple[int, Matched]] = field(default_factory=list)


class Importer:
    """업로드 파일 묶음을 분류/그룹핑하여 챕터 생성 요청으로 변환"""

    def __init__(
        self,
        config: Optional[ImportingConfig] = None,
        default_titles: Optional[Dict[str, str]] = None
    ):
        """
        Args:
            config: ImportingConfig (None이면 전역 설정)
            default_titles: 구간별 기본 제목 (None이면 전역 설정)
        """
        if config is None or default_titles is None:
            global_config = get_config()
            config = config or global_config.importing
            default_titles = default_titles or global_config.structure.default_titles
        self.config = config
        self.default_titles = default_titles
        self.patterns = NamePatterns(self.config)

    def import_batch(self, files: Iterable[FileEntry]) -> ImportResult:
        """파일 묶음 가져오기

        Args:
            files: FileEntry 묶음 (relative_path + read_bytes)

        Returns:
            ImportResult (created: 정렬된 생성 요청, skipped: 건너뛴 파일 수)

        Raises:
            ImportIOError: 파일을 읽지 못했고 on_read_error가 abort일 때
        """
        files = list(files)
        logger.info(f"Importing batch of {len(files)} files...")

        front_index = self._find_segment_file(files, self.patterns.is_frontmatter)
        back_index = self._find_segment_file(files, self.patterns.is_backmatter)
        groups = self._collect_groups(files)

        needed: Set[int] = {i for i in (front_index, back_index) if i is not None}
        for group in groups:
            needed.update(index for index, _ in group.members)

        texts = self._read_texts(files, sorted(needed))

        created: List[ChapterCreationRequest] = []
        consumed: Set[int] = set()

        if front_index is not None and front_index in texts:
            created.append(self._segment_request(ChapterType.FRONTMATTER, texts[front_index]))
            consumed.add(front_index)

        created.extend(self._chapter_requests(groups, texts, consumed))

        if back_index is not None and back_index in texts:
            created.append(self._segment_request(ChapterType.BACKMATTER, texts[back_index]))
            consumed.add(back_index)

        skipped_paths = [f.relative_path for i, f in enumerate(files) if i not in consumed]
        for path in skipped_paths:
            logger.debug(f"Skipped: {path}")

        result = ImportResult(created=created, skipped=len(skipped_paths), skipped_paths=skipped_paths)
        logger.info(
            f"✅ Import complete: {len(created)} requests "
            f"(front={result.count(ChapterType.FRONTMATTER)}, "
            f"body={result.count(ChapterType.CHAPTER)}, "
            f"back={result.count(ChapterType.BACKMATTER)}), {result.skipped} files skipped"
        )
        return result

    def _find_segment_file(
        self,
        files: List[FileEntry],
        predicate: Callable[[str], bool]
    ) -> Optional[int]:
        """표지어가 들어간 첫 파일의 인덱스 (없으면 None)"""
        for index, entry in enumerate(files):
            if predicate(entry.name):
                return index
        return None

    def _collect_groups(self, files: List[FileEntry]) -> List[_ChapterGroup]:
        """두 번째 경로 구간으로 그룹핑 후 폴더/파일 이름 해석

        Returns:
            유효한 하위 챕터가 하나 이상인 그룹 (처음 등장한 순서)
        """
        by_folder: "OrderedDict[str, List[int]]" = OrderedDict()
        for index, entry in enumerate(files):
            parts = entry.relative_path.split("/")
            if len(parts) < 2:
                continue
            by_folder.setdefault(parts[1], []).append(index)

        groups: List[_ChapterGroup] = []
        for encounter, (folder_name, indices) in enumerate(by_folder.items()):
            folder_match = self.patterns.match_chapter_folder(folder_name)
            if isinstance(folder_match, Unmatched):
                logger.debug(f"Folder skipped ({folder_match.reason}): {folder_name}")
                continue

            group = _ChapterGroup(folder=folder_match, encounter=encounter)
            for index in sorted(indices, key=lambda i: files[i].name):
                file_match = self.patterns.match_subchapter_file(files[index].name)
                if isinstance(file_match, Unmatched):
                    logger.debug(f"File skipped ({file_match.reason}): {files[index].relative_path}")
                    continue
                group.members.append((index, file_match))

            if not group.members:
                logger.debug(f"Empty chapter folder dropped: {folder_name}")
                continue
            groups.append(group)

        return groups

    def _read_texts(self, files: List[FileEntry], indices: List[int]) -> Dict[int, str]:
        """필요한 파일을 병렬로 읽어 디코딩

        결과는 인덱스 순서로 수집하므로 읽기 완료 순서와 무관하게 결정적이다.

        Returns:
            {파일 인덱스: 본문}. on_read_error가 skip이면 실패한 파일은 빠진다.
        """
        if not indices:
            return {}

        texts: Dict[int, str] = {}
        workers = min(self.config.max_workers, len(indices))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(index, executor.submit(self._read_one, files[index])) for index in indices]
            for index, future in futures:
                try:
                    texts[index] = future.result()
                except ImportIOError as e:
                    if self.config.on_read_error == "abort":
                        logger.error(f"❌ {e}")
                        for _, pending in futures:
                            pending.cancel()
                        raise
                    logger.warning(f"⚠️ {e} - skipped")
        return texts

    def _read_one(self, entry: FileEntry) -> str:
        try:
            data = entry.read_bytes()
        except Exception as e:
            # 압축 파일 등 OSError가 아닌 실패도 경로와 함께 보고
            raise ImportIOError(entry.relative_path, e) from e
        return decode_text(
            data,
            auto_detect=self.config.auto_detect_encoding,
            default_encoding=self.config.default_encoding,
            fallback_encodings=self.config.fallback_encodings,
            name=entry.relative_path
        )

    def _segment_request(self, chapter_type: ChapterType, text: str) -> ChapterCreationRequest:
        return ChapterCreationRequest(
            title=self.default_titles[chapter_type.value],
            content=text,
            type=chapter_type
        )

    def _chapter_requests(
        self,
        groups: List[_ChapterGroup],
        texts: Dict[int, str],
        consumed: Set[int]
    ) -> List[ChapterCreationRequest]:
        """챕터 그룹 → 본문 챕터 요청 (장 번호 오름차순, 같은 번호는 등장 순)"""
        ordered = sorted(groups, key=lambda g: (g.folder.sort_key, g.encounter))
        self._warn_duplicate_numbers(ordered)

        requests: List[ChapterCreationRequest] = []
        for group in ordered:
            subs = []
            for index, file_match in group.members:
                if index not in texts:
                    continue
                subs.append(SubChapterRequest(title=file_match.title, content=texts[index]))
                consumed.add(index)

            if not subs:
                logger.debug(f"Chapter dropped (no readable sub-chapters): {group.folder.title}")
                continue

            requests.append(ChapterCreationRequest(
                title=group.folder.title,
                content="",
                type=ChapterType.CHAPTER,
                sub_chapters=tuple(subs),
                number=group.folder.sort_key[0]
            ))
        return requests

    def _warn_duplicate_numbers(self, groups: List[_ChapterGroup]) -> None:
        seen: Set[Tuple[int, ...]] = set()
        for group in groups:
            key = group.folder.sort_key
            if key in seen:
                logger.warning(
                    f"⚠️ Duplicate chapter number {group.folder.number}: "
                    f"'{group.folder.title}' kept after earlier folder"
                )
            seen.add(key)
