"""이름 패턴 매처 테스트

챕터 폴더 / 하위 챕터 파일 / 머리말·맺음말 표지어 해석 검증
"""

import pytest

from ebook_chapter_processor.config.loader import ImportingConfig
from ebook_chapter_processor.stages.chapter import ChapterType
from ebook_chapter_processor.stages.name_patterns import Matched, NamePatterns, Unmatched


def test_chapter_folder():
    """챕터 폴더 이름 해석"""
    patterns = NamePatterns()

    assert patterns.match_chapter_folder("BAB 3 - Awal") == Matched(number="3", title="Awal")
    assert patterns.match_chapter_folder("BAB 12 - Dua Kata - Lagi") == Matched(
        number="12", title="Dua Kata - Lagi"
    )

    # 구분자/접두어가 다르면 실패
    assert isinstance(patterns.match_chapter_folder("BAB 3 Awal"), Unmatched)
    assert isinstance(patterns.match_chapter_folder("Bab 3 - Awal"), Unmatched)
    assert isinstance(patterns.match_chapter_folder("Draft BAB 3 - Awal"), Unmatched)
    assert isinstance(patterns.match_chapter_folder("BAB X - Awal"), Unmatched)

    print("✅ Chapter folder test passed!")


def test_subchapter_file():
    """하위 챕터 파일 이름 해석"""
    patterns = NamePatterns()

    match = patterns.match_subchapter_file("3.1 Pembuka.txt")
    assert match == Matched(number="3.1", title="Pembuka")
    assert match.sort_key == (3, 1)

    assert patterns.match_subchapter_file("3.10  Dua Kata.txt") == Matched(number="3.10", title="Dua Kata")

    # 소수점이 없거나 확장자가 다르면 실패
    assert isinstance(patterns.match_subchapter_file("3 Pembuka.txt"), Unmatched)
    assert isinstance(patterns.match_subchapter_file("3.1 Pembuka.docx"), Unmatched)
    assert isinstance(patterns.match_subchapter_file("3.1Pembuka.txt"), Unmatched)
    assert isinstance(patterns.match_subchapter_file("catatan.txt"), Unmatched)

    print("✅ Sub-chapter file test passed!")


def test_segment_markers():
    """머리말/맺음말 표지어 (대소문자 무시, 부분 일치)"""
    patterns = NamePatterns()

    assert patterns.segment_of("Kata Pengantar Penulis.txt") == ChapterType.FRONTMATTER
    assert patterns.segment_of("KATA PENGANTAR.txt") == ChapterType.FRONTMATTER
    assert patterns.segment_of("99 penutup buku.txt") == ChapterType.BACKMATTER
    assert patterns.segment_of("1.1 Pembuka.txt") is None

    print("✅ Segment marker test passed!")


def test_custom_patterns():
    """설정으로 문법 교체"""
    config = ImportingConfig(
        frontmatter_marker="preface",
        backmatter_marker="epilogue",
        chapter_folder_pattern=r"^Chapter (\d+): (.+)",
        subchapter_file_pattern=r"^(\d+-\d+)_(.+)\.md$"
    )
    patterns = NamePatterns(config)

    assert patterns.match_chapter_folder("Chapter 4: Storm") == Matched(number="4", title="Storm")
    assert patterns.segment_of("Preface.md") == ChapterType.FRONTMATTER

    # 번호 그룹이 숫자 형식이 아니면 Unmatched
    sub = patterns.match_subchapter_file("4-1_Rain.md")
    assert isinstance(sub, Unmatched)


def test_invalid_pattern():
    """그룹이 부족하거나 잘못된 정규식은 ValueError"""
    with pytest.raises(ValueError):
        NamePatterns(ImportingConfig(chapter_folder_pattern=r"^BAB \d+"))
    with pytest.raises(ValueError):
        NamePatterns(ImportingConfig(subchapter_file_pattern=r"(\d+"))


def main():
    """테스트 실행"""
    print("=" * 50)
    print("Name Pattern Tests")
    print("=" * 50)

    test_chapter_folder()
    test_subchapter_file()
    test_segment_markers()
    test_custom_patterns()
    test_invalid_pattern()

    print("=" * 50)
    print("✅ All tests passed!")
    print("=" * 50)


if __name__ == "__main__":
    main()
