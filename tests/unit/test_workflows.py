"""
Unit Tests - Daily Statistics Flow
"""
import asyncio

import pytest

pytest.importorskip("prefect")

from prefect.testing.utilities import prefect_test_harness

from vscodestat.collector import VscodeStatCollector
from vscodestat.config import Settings
from vscodestat.exceptions import SourceFetchError
from vscodestat.storage.csv_store import CsvTableStore
from workflows import daily_stats

from tests.conftest import FakeSource, make_payload


@pytest.fixture(scope="module")
def prefect_backend():
    with prefect_test_harness():
        yield


@pytest.fixture
def stub_collectors(monkeypatch, fixed_today):
    """Collectors built by the flow fetch from queued payloads per extension"""
    payloads = {}

    class StubCollector:
        @staticmethod
        def from_settings(settings, extension_name=None, out_dir=None):
            return VscodeStatCollector(
                extension_name,
                out_dir=out_dir,
                config=settings.collector.to_config(),
                source=FakeSource(payloads[extension_name]),
                today=fixed_today,
            )

    monkeypatch.setattr(daily_stats, "settings", Settings(app_env="testing"))
    monkeypatch.setattr(daily_stats, "VscodeStatCollector", StubCollector)
    return payloads


class TestDailyVscodeStats:
    """Tests for the daily_vscode_stats flow"""

    def test_two_extensions_keep_their_rows(self, prefect_backend, stub_collectors, tmp_path):
        """Test that two extensions collected into one directory both keep today's row"""
        stub_collectors["pub.a"] = make_payload(install=10)
        stub_collectors["pub.b"] = make_payload(install=20)

        result = asyncio.run(
            daily_stats.daily_vscode_stats(extensions=["pub.a", "pub.b"], out_dir=str(tmp_path))
        )

        assert [r["extension"] for r in result["extensions"]] == ["pub.a", "pub.b"]
        store = CsvTableStore(tmp_path)
        assert store.read_rows("2024_pub.a_vscodestat")["install"].to_list() == ["10"]
        assert store.read_rows("2024_pub.b_vscodestat")["install"].to_list() == ["20"]

    def test_single_extension_uses_configured_postfix(self, prefect_backend, stub_collectors, tmp_path):
        """Test that a single extension writes the configured file names"""
        stub_collectors["pub.a"] = make_payload(install=10)

        asyncio.run(daily_stats.daily_vscode_stats(extensions=["pub.a"], out_dir=str(tmp_path)))

        assert [p.name for p in tmp_path.iterdir()] == ["2024_vscodestat.csv"]

    def test_failed_extension_fails_the_flow(self, prefect_backend, stub_collectors, tmp_path):
        """Test that the flow fails when one extension cannot be collected"""
        stub_collectors["pub.a"] = make_payload(install=10)
        stub_collectors["pub.b"] = SourceFetchError("vsce exited with code 1")

        with pytest.raises(RuntimeError, match="pub.b"):
            asyncio.run(
                daily_stats.daily_vscode_stats(extensions=["pub.a", "pub.b"], out_dir=str(tmp_path))
            )

        assert [p.name for p in tmp_path.iterdir()] == ["2024_pub.a_vscodestat.csv"]
