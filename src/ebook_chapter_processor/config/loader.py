"""설정 파일 로더 (YAML)

config.yml을 읽어서 Python 객체로 변환
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict
from ebook_chapter_processor.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yml"

READ_ERROR_POLICIES = {"abort", "skip"}
REORDER_POLICIES = {"verbatim", "partition", "strict"}


@dataclass
class ImportingConfig:
    """가져오기(Importer) 옵션

    이름 패턴은 이름 맨 앞에 고정(^)한다. "01. BAB 1 - Awal"처럼 앞에 다른
    글자가 붙은 이름은 일부러 챕터로 인정하지 않는다.
    """
    frontmatter_marker: str = "kata pengantar"
    backmatter_marker: str = "penutup"
    chapter_folder_pattern: str = r"^BAB (\d+) - (.+)"
    subchapter_file_pattern: str = r"^(\d+\.\d+)\s+(.+)\.txt$"
    max_workers: int = 4
    auto_detect_encoding: bool = True
    default_encoding: str = "utf-8"
    # 감지 신뢰도가 낮을 때 차례로 시도 (엄격 디코딩이 성공한 첫 인코딩)
    fallback_encodings: List[str] = field(default_factory=lambda: ["cp949", "cp1252"])
    on_read_error: str = "abort"  # abort|skip

    def __post_init__(self) -> None:
        if self.on_read_error not in READ_ERROR_POLICIES:
            raise ValueError(f"Unsupported on_read_error: {self.on_read_error}")
        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")


@dataclass
class StructureConfig:
    """챕터 목록 구성 옵션"""
    default_titles: Dict[str, str] = field(default_factory=lambda: {
        "frontmatter": "Kata Pengantar",
        "chapter": "Bab Baru",
        "backmatter": "Penutup",
    })
    indentation: int = 0
    line_spacing: float = 1.5
    reorder_policy: str = "verbatim"  # verbatim|partition|strict


@dataclass
class LoggingConfig:
    """로깅 설정"""
    file_level: str = "DEBUG"
    console_level: str = "INFO"


@dataclass
class Config:
    """전체 설정"""
    importing: ImportingConfig = field(default_factory=ImportingConfig)
    structure: StructureConfig = field(default_factory=StructureConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        if self.structure.reorder_policy not in REORDER_POLICIES:
            raise ValueError(f"Unsupported reorder_policy: {self.structure.reorder_policy}")
        missing = {"frontmatter", "chapter", "backmatter"} - set(self.structure.default_titles)
        if missing:
            raise ValueError(f"default_titles missing: {sorted(missing)}")


def config_from_dict(data: Optional[Dict[str, Any]]) -> Config:
    """dict → Config 변환 (누락된 섹션/키는 기본값 사용)

    Args:
        data: YAML에서 읽은 dict

    Returns:
        Config 객체

    Raises:
        ValueError: 알 수 없는 키나 잘못된 값
    """
    data = data or {}
    try:
        structure_data = dict(data.get("structure") or {})
        if "default_titles" in structure_data:
            titles = StructureConfig().default_titles
            titles.update(structure_data["default_titles"] or {})
            structure_data["default_titles"] = titles
        return Config(
            importing=ImportingConfig(**(data.get("importing") or {})),
            structure=StructureConfig(**structure_data),
            logging=LoggingConfig(**(data.get("logging") or {}))
        )
    except TypeError as e:
        raise ValueError(f"Invalid config: {e}") from e


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """config.yml 로드

    Args:
        config_path: 설정 파일 경로

    Returns:
        Config 객체

    Raises:
        FileNotFoundError: 설정 파일이 없을 때
        yaml.YAMLError: YAML 파싱 에러
    """
    path = Path(config_path)
    if not path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading config from: {config_path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    config = config_from_dict(data)
    logger.info(f"✅ Config loaded: reorder_policy={config.structure.reorder_policy}")
    return config


# 전역 설정 인스턴스 (싱글톤)
_config: Optional[Config] = None


def get_config() -> Config:
    """전역 설정 인스턴스 반환 (싱글톤)

    설정 파일이 없으면 기본값을 사용한다.

    Example:
        >>> from ebook_chapter_processor.config.loader import get_config
        >>> config = get_config()
        >>> print(config.importing.frontmatter_marker)
    """
    global _config
    if _config is None:
        try:
            _config = load_config()
        except FileNotFoundError:
            logger.warning(f"⚠️ {DEFAULT_CONFIG_PATH} not found, using default config")
            _config = Config()
    return _config


def reset_config() -> None:
    """싱글톤 초기화 (설정 파일을 다시 읽게 함)"""
    global _config
    _config = None


def save_config(config: Config, config_path: str = DEFAULT_CONFIG_PATH) -> None:
    """config.yml 저장

    Args:
        config: Config 객체
        config_path: 설정 파일 경로
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(asdict(config), f, allow_unicode=True, default_flow_style=False, sort_keys=False)

    logger.info(f"✅ Config saved: {config_path}")
