from __future__ import annotations

from pathlib import Path

from adapters.filesystem.svg_repository import XML_DECLARATION, FileSystemSvgRepository


def test_save_writes_declaration_and_markup(tmp_path: Path) -> None:
    path = tmp_path / "out" / "door.svg"

    FileSystemSvgRepository().save("<svg />", path)

    content = path.read_text(encoding="utf-8")
    assert content.startswith(XML_DECLARATION)
    assert content.rstrip().endswith("<svg />")
    assert not path.with_suffix(".svg.tmp").exists()


def test_save_overwrites_existing_file(tmp_path: Path) -> None:
    repo = FileSystemSvgRepository()
    path = tmp_path / "door.svg"

    repo.save("<svg>old</svg>", path)
    repo.save("<svg>new</svg>", path)

    content = path.read_text(encoding="utf-8")
    assert "new" in content
    assert "old" not in content


def test_clear_removes_svg_and_lock_files(tmp_path: Path) -> None:
    repo = FileSystemSvgRepository()
    repo.save("<svg />", tmp_path / "a.svg")
    repo.save("<svg />", tmp_path / "b.svg")
    (tmp_path / "keep.json").write_text("{}", encoding="utf-8")

    removed = repo.clear(tmp_path)

    assert removed >= 2
    assert sorted(path.name for path in tmp_path.iterdir()) == ["keep.json"]
    assert repo.clear(tmp_path / "missing") == 0
