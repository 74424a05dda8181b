"""Pytest configuration and fixtures for movetrace tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional

import pytest

from movetrace.errors import MetadataLookupError
from movetrace.models import DependencyRef, ModuleDescriptor, PackageMetadata, parse_package_id


def make_metadata(package_id: str, deps: Optional[List[str]] = None, modules: Optional[List[str]] = None) -> PackageMetadata:
    pid = parse_package_id(package_id)
    return PackageMetadata(
        address=pid.address,
        name=pid.name,
        modules=tuple(ModuleDescriptor(name=m) for m in (modules or [])),
        deps=tuple(
            DependencyRef(account=d.split("::")[0], package_name=d.split("::")[1])
            for d in (deps or [])
        ),
    )


class FakeProvider:
    """In-memory metadata provider that records every fetch."""

    def __init__(self, packages: Dict[str, PackageMetadata]):
        self.packages = packages
        self.calls: List[tuple] = []

    def fetch(self, package_id: str, network: str) -> PackageMetadata:
        self.calls.append((package_id, network))
        if package_id not in self.packages:
            raise MetadataLookupError(f"Package not found: {package_id}", package_id=package_id)
        return self.packages[package_id]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch) -> Path:
    """Point config and cache files at a temporary directory."""
    monkeypatch.setattr("movetrace.config.BASE_DIR", temp_dir)
    monkeypatch.setattr("movetrace.config.CONFIG_FILE", temp_dir / "config.toml")
    monkeypatch.setattr("movetrace.config.CACHE_FILE", temp_dir / "package_metadata.json")
    return temp_dir


@pytest.fixture
def diamond_provider() -> FakeProvider:
    """A -> [B, C], B -> [C], C -> []."""
    return FakeProvider(
        {
            "0xa::A": make_metadata("0xa::A", deps=["0xb::B", "0xc::C"], modules=["a_main"]),
            "0xb::B": make_metadata("0xb::B", deps=["0xc::C"], modules=["b_one", "b_two"]),
            "0xc::C": make_metadata("0xc::C", modules=["c_core"]),
        }
    )


@pytest.fixture
def fake_cli_provider(monkeypatch, temp_home: Path, diamond_provider: FakeProvider) -> FakeProvider:
    """Make the CLI use the diamond provider instead of a live registry client."""
    monkeypatch.setattr("movetrace.cli.AptosRegistryClient", lambda **kwargs: diamond_provider)
    return diamond_provider
