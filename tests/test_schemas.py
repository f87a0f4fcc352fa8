"""Schema modules must build cleanly on the current pydantic major version."""

import runpy
import warnings
from pathlib import Path

import pytest
from pydantic.warnings import PydanticDeprecatedSince20

PACKAGE_DIR = Path(__file__).resolve().parents[1] / "kvb_crm"
MODULES = sorted(PACKAGE_DIR.glob("schemas/*.py")) + [PACKAGE_DIR / "config.py"]


@pytest.mark.parametrize("path", MODULES, ids=lambda p: p.name)
def test_models_use_config_dict(path):
    with warnings.catch_warnings():
        warnings.simplefilter("error", PydanticDeprecatedSince20)
        namespace = runpy.run_path(str(path), run_name=f"check_{path.stem}")
    assert namespace
