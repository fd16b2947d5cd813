from __future__ import annotations

import os

import pytest

from lfs_s3.config import StorageConfig

from .fakes import OID, FakeStorage


@pytest.fixture
def config():
    return StorageConfig(endpoint="https://s3.example.test", bucket="lfs")


@pytest.fixture
def objects_dir(tmp_path):
    root = tmp_path / "objects"
    os.makedirs(root / OID[:2] / OID[2:4])
    return str(root)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def factory(storage):
    made = []

    def build(cfg):
        made.append(cfg)
        return storage

    build.made = made
    return build
