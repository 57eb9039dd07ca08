"""텍스트 디코딩 유틸리티

업로드된 파일의 바이트를 평문으로 변환 (UTF-8 우선, 실패 시 chardet 감지)
"""

import codecs
import re
from typing import Iterable, Optional

import chardet

from ebook_chapter_processor.utils.logger import get_logger

logger = get_logger(__name__)

# 감지 결과를 신뢰하는 최소 confidence
MIN_CONFIDENCE = 0.7

# C1 제어 문자는 실제 본문에 나오지 않으므로 잘못된 인코딩의 신호
C1_CONTROL_RE = re.compile("[\x80-\x9f]")


def detect_encoding(data: bytes, sample_size: int = 10000) -> Optional[str]:
    """인코딩 감지

    Args:
        data: 파일 바이트
        sample_size: 샘플 크기 (바이트)

    Returns:
        인코딩 이름 (예: 'utf-8', 'cp1252'), 신뢰도가 낮으면 None
    """
    result = chardet.detect(data[:sample_size])
    encoding = result.get("encoding")
    confidence = result.get("confidence") or 0

    if encoding and confidence > MIN_CONFIDENCE:
        logger.debug(f"Encoding detected: {encoding} ({confidence:.2f})")
        return encoding

    logger.debug(f"Low confidence encoding: {encoding} ({confidence:.2f})")
    return None


def _decode_strict(data: bytes, encoding: str) -> Optional[str]:
    try:
        text = data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        logger.debug(f"Decode as {encoding} failed: {e}")
        return None
    if C1_CONTROL_RE.search(text):
        logger.debug(f"Decode as {encoding} produced control characters")
        return None
    return text


def decode_text(
    data: bytes,
    auto_detect: bool = True,
    default_encoding: str = "utf-8",
    fallback_encodings: Iterable[str] = ("cp949", "cp1252"),
    name: str = ""
) -> str:
    """바이트 → 평문

    BOM은 제거한다. 기본 인코딩으로 디코딩할 수 없으면 auto_detect일 때
    chardet 결과(신뢰도 0.7 초과)와 fallback_encodings를 차례로 엄격하게
    시도하고, 모두 실패하면 대체 문자(U+FFFD)로 채운다.

    Args:
        data: 파일 바이트
        auto_detect: 인코딩 자동 감지 사용 여부
        default_encoding: 먼저 시도할 인코딩
        fallback_encodings: 감지 실패 시 시도할 인코딩 (순서대로)
        name: 로그용 파일 이름

    Returns:
        디코딩된 문자열
    """
    if data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):]

    try:
        return data.decode(default_encoding)
    except UnicodeDecodeError:
        logger.warning(f"⚠️ Failed to decode {name or 'file'} as {default_encoding}")

    if auto_detect:
        detected = detect_encoding(data)
        candidates = ([detected] if detected else []) + list(fallback_encodings)
        for encoding in candidates:
            text = _decode_strict(data, encoding)
            if text is not None:
                logger.info(f"Decoded {name or 'file'} as {encoding}")
                return text

    return data.decode(default_encoding, errors="replace")
