import pytest

from parseh import Config, collect_declarations, parse_header


HEADER = "test_header.h"


def collect_src(source, *clang_args, config=None):
    cfg = config or Config(clang_args=["-x", "c", "-std=c11"] + list(clang_args))
    tu = parse_header(HEADER, cfg, unsaved_files=[(HEADER, source)])
    return collect_declarations(tu, cfg)


@pytest.fixture
def collect():
    return collect_src


@pytest.fixture(autouse=True)
def _no_env_cflags(monkeypatch):
    monkeypatch.delenv("PARSEH_CFLAGS", raising=False)
