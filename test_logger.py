"""로거 테스트"""

import pytest

from ebook_chapter_processor.utils.logger import get_logger, setup_logging


def test_log_file_written(tmp_path):
    """파일 핸들러는 DEBUG까지 기록"""
    log_file = setup_logging(log_dir=tmp_path)
    try:
        logger = get_logger("ebook_chapter_processor.test")
        logger.debug("디버그 메시지 (파일에만 기록)")
        logger.info("정보 메시지 (콘솔 + 파일)")

        for handler in get_logger().handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert log_file.parent == tmp_path
        assert "디버그 메시지" in text
        assert "정보 메시지" in text
    finally:
        setup_logging()


def test_reconfigure_does_not_duplicate_handlers(tmp_path):
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)
    try:
        assert len(get_logger().handlers) == 2
    finally:
        setup_logging()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
