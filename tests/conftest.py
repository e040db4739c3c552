"""Pytest configuration for QimenEngine."""

from __future__ import annotations

import pytest

from qimenengine.qimen import Plate, build_plate


@pytest.fixture(autouse=True)
def _isolated_config_home(tmp_path, monkeypatch):
    """Keep settings files out of the real home directory."""

    monkeypatch.setenv("QIMENENGINE_HOME", str(tmp_path / "qimen-home"))


@pytest.fixture(scope="session")
def spring_plate() -> Plate:
    return build_plate(2024, 3, 15, 10)


@pytest.fixture(scope="session")
def jia_zi_plate() -> Plate:
    # 2000-01-07 is a Jia-Zi day; 12:00 is the Geng-Wu hour.
    return build_plate(2000, 1, 7, 12)
