"""CLI 인터페이스

Typer 기반 명령줄 인터페이스, Rich 기반 출력
"""

import json
import typer
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from ebook_chapter_processor.config.loader import Config, get_config, load_config
from ebook_chapter_processor.stages.chapter import ChapterType
from ebook_chapter_processor.stages.errors import StructureError
from ebook_chapter_processor.stages.file_source import scan_directory
from ebook_chapter_processor.stages.importer import Importer
from ebook_chapter_processor.stages.name_patterns import Matched, NamePatterns
from ebook_chapter_processor.stages.store import ChapterStore
from ebook_chapter_processor.stages.structurer import Structurer
from ebook_chapter_processor.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)
console = Console()
app = typer.Typer(help="Ebook Chapter Processor - 업로드 폴더를 책 구조로 정리하는 도구")

SEGMENT_LABELS = {
    ChapterType.FRONTMATTER: "머리말",
    ChapterType.CHAPTER: "본문",
    ChapterType.BACKMATTER: "맺음말",
}


def _load(config_path: Optional[Path], quiet: bool = False) -> Config:
    config = load_config(str(config_path)) if config_path else get_config()
    # JSON 출력과 섞이지 않도록 quiet이면 경고 이상만 콘솔에 표시
    console_level = "WARNING" if quiet else config.logging.console_level
    setup_logging(config.logging.file_level, console_level)
    return config


@app.command("import")
def import_folder(
    folder: Path = typer.Argument(..., help="업로드 루트 폴더"),
    as_json: bool = typer.Option(False, "--json", help="챕터 목록을 JSON으로 출력"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="설정 파일 경로")
):
    """폴더를 읽어 머리말/본문/맺음말 구조로 정리"""
    config = _load(config_path, quiet=as_json)
    store = ChapterStore(
        structurer=Structurer(config.structure),
        importer=Importer(config.importing, config.structure.default_titles)
    )

    try:
        entries = scan_directory(folder)
        result = store.import_files(entries)
    except (FileNotFoundError, StructureError) as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)

    if as_json:
        numbers = store.page_numbers()
        payload = [chapter.to_dict(numbers.get(chapter.id)) for chapter in store.chapters]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    console.print(Panel.fit(f"📚 {folder}", style="bold blue"))

    table = Table(title="챕터 구조")
    table.add_column("구간", style="cyan")
    table.add_column("번호", style="yellow", justify="right")
    table.add_column("제목", style="green")
    table.add_column("하위 챕터", justify="right")
    for item in store.segments():
        table.add_row(
            SEGMENT_LABELS[item.chapter.type],
            str(item.page_number) if item.page_number is not None else "-",
            item.chapter.title,
            str(len(item.chapter.sub_chapters))
        )
    console.print(table)
    console.print(f"✅ {len(result.created)}개 챕터 생성, {result.skipped}개 파일 건너뜀")


@app.command()
def check(
    names: List[str] = typer.Argument(..., help="확인할 폴더/파일 이름"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="설정 파일 경로")
):
    """폴더/파일 이름이 어떻게 해석되는지 확인"""
    config = _load(config_path)
    patterns = NamePatterns(config.importing)

    table = Table(title="이름 해석 결과")
    table.add_column("이름", style="cyan")
    table.add_column("해석", style="green")
    table.add_column("번호", style="yellow")
    table.add_column("제목")

    for name in names:
        segment = patterns.segment_of(name)
        folder = patterns.match_chapter_folder(name)
        sub = patterns.match_subchapter_file(name)
        if isinstance(folder, Matched):
            table.add_row(name, "챕터 폴더", folder.number, folder.title)
        elif isinstance(sub, Matched):
            table.add_row(name, "하위 챕터", sub.number, sub.title)
        elif segment is not None:
            table.add_row(name, SEGMENT_LABELS[segment], "-", config.structure.default_titles[segment.value])
        else:
            table.add_row(name, "[red]해석 불가[/red]", "-", "-")

    console.print(table)


if __name__ == "__main__":
    app()
