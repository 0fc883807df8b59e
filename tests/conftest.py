import sys
from pathlib import Path

import pytest
from lxml import etree

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from build_override.db import Base, configure_engine, init_db  # noqa: E402

NS = "http://schemas.microsoft.com/developer/msbuild/2003"
Q = "{%s}" % NS


@pytest.fixture()
def temp_db(tmp_path):
    db_path = tmp_path / "test.db"
    configure_engine(db_path)
    init_db(Base)
    yield db_path


@pytest.fixture()
def user_file(tmp_path):
    """Write ``content`` to ``Web.csproj.user`` next to an empty project file."""

    def _write(content: str | bytes, name: str = "Web.csproj") -> Path:
        (tmp_path / name).write_text("<Project />", encoding="utf-8")
        path = tmp_path / f"{name}.user"
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return path

    return _write


def canonical(path: Path) -> bytes:
    return etree.tostring(etree.parse(str(path)), method="c14n")


def setting_values(path: Path, name: str = "MvcBuildViews") -> list[str]:
    root = etree.parse(str(path)).getroot()
    return [el.text or "" for el in root.iter(Q + name)]
