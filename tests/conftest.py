from __future__ import annotations

from pathlib import Path

import pytest

from radar3d.utils import log

COLOR_TEXT = "\n".join(
    [
        "dimension,color",
        '"A","ff0000"',
        "B,00ff00",
        '"C",0000ff',
    ]
)

DATA_TEXT = "\n".join(
    [
        "dimension,time,value",
        '"A","2020-01",1',
        '"A","2020-02",2',
        '"A","2020-03",4',
        '"A","2020-04",8',
        '"A","2020-05",16',
        "B,2020-01,0",
        "B,2020-02,3",
        "B,2020-03,5",
        "B,2020-04,7",
        "B,2020-05,9",
        "C,2020-01,-1",
        "C,2020-02,10",
        "C,2020-03,20",
        "C,2020-04,30",
        "C,2020-05,40",
    ]
)


@pytest.fixture(autouse=True)
def _redirect_log(tmp_path: Path, monkeypatch) -> Path:
    path = tmp_path / "radar3d.log"
    monkeypatch.setattr(log, "DEFAULT_LOG_PATH", path)
    return path


@pytest.fixture
def log_path(_redirect_log: Path) -> Path:
    return _redirect_log


@pytest.fixture
def color_text() -> str:
    return COLOR_TEXT


@pytest.fixture
def data_text() -> str:
    return DATA_TEXT
