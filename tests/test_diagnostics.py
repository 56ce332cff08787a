"""Tests for log collection and DNS resolution."""

import asyncio
import os
import socket
import threading
import time
import zipfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from maintctl.diagnostics.dns import resolve_hostnames
from maintctl.diagnostics.logs import collect_logs

STAMP = datetime(2026, 3, 1, 2, 30, tzinfo=UTC)


class TestCollectLogs:
    @pytest.fixture
    def sources(self, tmp_path: Path) -> list[Path]:
        service_logs = tmp_path / "Service" / "Logs"
        engine_logs = tmp_path / "Engine" / "Logs"
        (service_logs / "archive").mkdir(parents=True)
        engine_logs.mkdir(parents=True)
        (service_logs / "service.log").write_text("svc")
        (service_logs / "archive" / "old.log").write_text("old")
        (engine_logs / "engine.log").write_text("eng")
        return [service_logs, engine_logs]

    def test_bundles_all_sources(self, tmp_path: Path, sources: list[Path]):
        bundle = collect_logs(sources, tmp_path / "out", "analytics-01", STAMP)

        assert bundle.archive_path.name == "analytics-01-logs-20260301-023000.zip"
        assert bundle.files == 3
        with zipfile.ZipFile(bundle.archive_path) as zf:
            names = sorted(zf.namelist())
        assert names == [
            "00-Logs/archive/old.log",
            "00-Logs/service.log",
            "01-Logs/engine.log",
        ]

    def test_missing_source_is_skipped(self, tmp_path: Path, sources: list[Path]):
        missing = tmp_path / "nope"
        bundle = collect_logs(
            [*sources, missing], tmp_path / "out", "analytics-01", STAMP
        )
        assert bundle.files == 3
        assert bundle.skipped_sources == [missing]

    def test_since_filters_old_files(self, tmp_path: Path, sources: list[Path]):
        old = sources[0] / "archive" / "old.log"
        ten_days_ago = (datetime.now(UTC) - timedelta(days=10)).timestamp()
        os.utime(old, (ten_days_ago, ten_days_ago))

        bundle = collect_logs(
            sources,
            tmp_path / "out",
            "analytics-01",
            STAMP,
            since=datetime.now(UTC) - timedelta(days=1),
        )

        assert bundle.files == 2

    def test_single_file_source(self, tmp_path: Path):
        log_file = tmp_path / "install.log"
        log_file.write_text("x")

        bundle = collect_logs([log_file], tmp_path / "out", "h", STAMP)

        with zipfile.ZipFile(bundle.archive_path) as zf:
            assert zf.namelist() == ["00-install.log/install.log"]


class TestResolveHostnames:
    @pytest.mark.asyncio
    async def test_resolves_all(self):
        async def resolver(host: str) -> list[str]:
            return {"a.example": ["10.0.0.1"], "b.example": ["10.0.0.2"]}[host]

        report = await resolve_hostnames(["a.example", "b.example"], 1.0, resolver)

        assert report.resolved == {"a.example": ["10.0.0.1"], "b.example": ["10.0.0.2"]}
        assert report.complete

    @pytest.mark.asyncio
    async def test_failure_is_reported_per_host(self):
        async def resolver(host: str) -> list[str]:
            if host == "bad.example":
                raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
            return ["10.0.0.1"]

        report = await resolve_hostnames(["good.example", "bad.example"], 1.0, resolver)

        assert report.resolved == {"good.example": ["10.0.0.1"]}
        assert "not known" in report.failed["bad.example"]
        assert not report.complete

    @pytest.mark.asyncio
    async def test_hung_lookup_times_out_with_partial_results(self):
        async def resolver(host: str) -> list[str]:
            if host == "hung.example":
                await asyncio.sleep(60)
            return ["10.0.0.1"]

        report = await resolve_hostnames(["fast.example", "hung.example"], 0.05, resolver)

        assert report.resolved == {"fast.example": ["10.0.0.1"]}
        assert report.timed_out == ["hung.example"]

    @pytest.mark.asyncio
    async def test_duplicates_resolved_once(self):
        calls: list[str] = []

        async def resolver(host: str) -> list[str]:
            calls.append(host)
            return ["10.0.0.1"]

        await resolve_hostnames(["a.example", "a.example"], 1.0, resolver)

        assert calls == ["a.example"]

    @pytest.mark.asyncio
    async def test_empty_input(self):
        report = await resolve_hostnames([], 1.0)
        assert report.complete
        assert report.resolved == {}

    @pytest.mark.asyncio
    async def test_system_resolver_localhost(self):
        report = await resolve_hostnames(["localhost"], 5.0)
        assert report.resolved["localhost"]

    @pytest.mark.asyncio
    async def test_system_resolver_dedupes_addresses(self, monkeypatch):
        def fake_getaddrinfo(*args, **kwargs):
            v4 = (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.0.0.5", 0))
            v6 = (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("fe80::1", 0, 0, 0))
            return [v4, v4, v6]

        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)

        report = await resolve_hostnames(["db.example"], 1.0)

        assert report.resolved == {"db.example": ["10.0.0.5", "fe80::1"]}

    @pytest.mark.asyncio
    async def test_system_resolver_failure(self, monkeypatch):
        def failing_getaddrinfo(*args, **kwargs):
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

        monkeypatch.setattr(socket, "getaddrinfo", failing_getaddrinfo)

        report = await resolve_hostnames(["bad.example"], 1.0)

        assert "not known" in report.failed["bad.example"]

    def test_hung_system_lookup_does_not_outlive_deadline(self, monkeypatch):
        release = threading.Event()

        def hung_getaddrinfo(*args, **kwargs):
            release.wait(10)
            raise socket.gaierror(socket.EAI_AGAIN, "Temporary failure")

        monkeypatch.setattr(socket, "getaddrinfo", hung_getaddrinfo)

        started = time.monotonic()
        try:
            report = asyncio.run(resolve_hostnames(["hung.example"], 0.2))
            elapsed = time.monotonic() - started
        finally:
            release.set()

        assert report.timed_out == ["hung.example"]
        assert elapsed < 2.0
