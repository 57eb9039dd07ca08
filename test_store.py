"""ChapterStore 테스트

가져오기 → 목록 반영, 드래그 이동, 삭제, 실패 시 목록 보존 검증
"""

import itertools
import unittest.mock as mock

import pytest

from ebook_chapter_processor.config.loader import ImportingConfig, StructureConfig
from ebook_chapter_processor.stages.chapter import ChapterType
from ebook_chapter_processor.stages.errors import ImportIOError, InvalidReorder
from ebook_chapter_processor.stages.file_source import MemoryFileEntry
from ebook_chapter_processor.stages.importer import Importer
from ebook_chapter_processor.stages.store import ChapterStore
from ebook_chapter_processor.stages.structurer import Structurer, is_segment_ordered


def make_store(policy: str = "verbatim") -> ChapterStore:
    counter = itertools.count(1)
    structure = StructureConfig(reorder_policy=policy)
    return ChapterStore(
        structurer=Structurer(structure, id_generator=lambda: f"id-{next(counter)}"),
        importer=Importer(ImportingConfig(), structure.default_titles)
    )


def book_files():
    return [
        MemoryFileEntry.from_text("Buku/Kata Pengantar.txt", "Salam"),
        MemoryFileEntry.from_text("Buku/BAB 2 - Dua/2.1 A.txt", "2a"),
        MemoryFileEntry.from_text("Buku/BAB 1 - Satu/1.1 A.txt", "1a"),
        MemoryFileEntry.from_text("Buku/BAB 1 - Satu/1.2 B.txt", "1b"),
        MemoryFileEntry.from_text("Buku/Penutup.txt", "Akhir"),
    ]


def test_import_files():
    """가져오기 결과가 구간 순서대로 저장됨"""
    store = make_store()

    result = store.import_files(book_files())

    assert result.skipped == 0
    assert [c.title for c in store.chapters] == ["Kata Pengantar", "Satu", "Dua", "Penutup"]
    assert [len(c.sub_chapters) for c in store.chapters] == [0, 2, 1, 0]
    numbers = store.page_numbers()
    assert [numbers.get(c.id) for c in store.chapters] == [None, 1, 2, None]


def test_import_into_existing_list():
    """기존 목록에 가져오기 → 새 본문은 기존 본문 뒤, 맺음말 앞"""
    store = make_store()
    manual = store.add_empty_chapter(ChapterType.CHAPTER)
    store.add_empty_chapter(ChapterType.BACKMATTER, "Daftar Pustaka")

    store.import_files(book_files())

    assert [c.title for c in store.chapters] == [
        "Kata Pengantar", "Bab Baru", "Satu", "Dua", "Daftar Pustaka", "Penutup"
    ]
    assert store.page_numbers()[manual.id] == 1
    assert is_segment_ordered(store.chapters)


def test_failed_import_leaves_store_unchanged():
    """읽기 실패 → 목록 변화 없음"""
    store = make_store()
    store.import_files(book_files())
    before = store.chapters

    broken = mock.Mock()
    broken.relative_path = "Buku/BAB 3 - Tiga/3.1 A.txt"
    broken.name = "3.1 A.txt"
    broken.read_bytes.side_effect = OSError("disk error")

    with pytest.raises(ImportIOError):
        store.import_files([broken])

    assert store.chapters == before


def test_move_and_reorder():
    """드래그 이동과 챕터 순서 재지정"""
    store = make_store()
    store.import_files(book_files())
    front, satu, dua, back = store.chapters

    store.move(dua.id, satu.id)
    assert [c.title for c in store.chapters] == ["Kata Pengantar", "Dua", "Satu", "Penutup"]
    assert store.page_numbers() == {dua.id: 1, satu.id: 2}

    store.reorder_chapters([front, satu, dua, back])
    assert [c.title for c in store.chapters] == ["Kata Pengantar", "Satu", "Dua", "Penutup"]


def test_invalid_reorder_leaves_store_unchanged():
    store = make_store()
    store.import_files(book_files())
    before = store.chapters

    with pytest.raises(InvalidReorder):
        store.reorder_ids([c.id for c in before][:-1])

    assert store.chapters == before


def test_strict_policy_rejects_cross_segment_drag():
    store = make_store("strict")
    store.import_files(book_files())
    front, satu, _, _ = store.chapters

    with pytest.raises(InvalidReorder):
        store.move(satu.id, front.id)

    assert store.chapters[0].id == front.id


def test_remove_chapter():
    """삭제 후 번호 다시 계산"""
    store = make_store()
    store.import_files(book_files())
    _, satu, dua, _ = store.chapters

    removed = store.remove_chapter(satu.id)

    assert removed.title == "Satu"
    assert len(store) == 3
    assert store.page_numbers() == {dua.id: 1}
    with pytest.raises(KeyError):
        store.remove_chapter(satu.id)


def test_chapters_returns_copy():
    store = make_store()
    store.import_files(book_files())

    store.chapters.clear()

    assert len(store) == 4


def main():
    """테스트 실행"""
    print("=" * 50)
    print("Chapter Store Tests")
    print("=" * 50)

    test_import_files()
    test_import_into_existing_list()
    test_failed_import_leaves_store_unchanged()
    test_move_and_reorder()
    test_invalid_reorder_leaves_store_unchanged()
    test_strict_policy_rejects_cross_segment_drag()
    test_remove_chapter()
    test_chapters_returns_copy()

    print("=" * 50)
    print("✅ All tests passed!")
    print("=" * 50)


if __name__ == "__main__":
    main()
