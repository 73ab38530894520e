from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from bibsync.config.scan import MATCH_THRESHOLD_ENV, SIMILARITY_ENV
from bibsync.config.storage import DATA_DIR_ENV

if TYPE_CHECKING:
    from pathlib import Path


SAMPLE_BIBTEX = r"""@preamble{{\newcommand{\noop}[1]{}}}

@string{jcp = {Journal of Chemical Physics}}

@article{smith2020,
  author = {Smith, John},
  title = {A Study of Things},
  journal = jcp,
  year = {2020}
}

@book{doe2019,
  author = {Doe, Jane},
  title = {The Book},
  year = {2019}
}

@comment{jabref-meta: databaseType:bibtex;}

@comment{jabref-meta: grouping:
0 AllEntriesGroup:;
1 StaticGroup:Reading\;0\;1\;\;\;\;;
2 StaticGroup:Later\;0\;1\;\;\;\;;
1 StaticGroup:Done\;0\;1\;\;\;\;;
}
"""


@pytest.fixture(autouse=True)
def clean_bibsync_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(MATCH_THRESHOLD_ENV, raising=False)
    monkeypatch.delenv(SIMILARITY_ENV, raising=False)
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "data"))


@pytest.fixture
def sample_bibtex() -> str:
    return SAMPLE_BIBTEX


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "library.bib"
    path.write_text(SAMPLE_BIBTEX, encoding="utf-8")
    return path
