"""Tests for armorpage.pages.cache: snapshots, modes and debounced rescans."""

import threading
import time

import pytest

from armorpage.pages.cache import RescanScheduler, RouteCache, is_route_file
from conftest import write_tree


def wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestIsRouteFile:
    def test_page_and_layout_qualify(self) -> None:
        assert is_route_file("/site/routes/=page.html")
        assert is_route_file("/site/routes/blog/=layout.html")

    def test_other_files_ignored(self) -> None:
        assert not is_route_file("/site/routes/style.css")
        assert not is_route_file("/site/routes/page.html")
        assert not is_route_file("/site/routes/=page.html.swp")


class TestRescanScheduler:
    def test_burst_runs_once(self) -> None:
        calls: list[int] = []
        scheduler = RescanScheduler(0.05, lambda: calls.append(1))

        for _ in range(5):
            scheduler.trigger()

        assert wait_for(lambda: len(calls) == 1)
        time.sleep(0.15)
        assert len(calls) == 1
        assert scheduler.pending is False

    def test_trigger_resets_window(self) -> None:
        fired = threading.Event()
        scheduler = RescanScheduler(0.1, fired.set)

        scheduler.trigger()
        time.sleep(0.06)
        scheduler.trigger()
        time.sleep(0.06)
        # 0.12s since the first trigger, but only 0.06s since the last.
        assert not fired.is_set()
        assert fired.wait(1.0)

    def test_cancel_drops_pending_run(self) -> None:
        calls: list[int] = []
        scheduler = RescanScheduler(0.05, lambda: calls.append(1))
        scheduler.trigger()
        assert scheduler.pending is True
        scheduler.cancel()
        time.sleep(0.15)
        assert calls == []
        assert scheduler.pending is False

    def test_action_failure_is_logged(self, caplog) -> None:
        def boom() -> None:
            raise RuntimeError("scan failed")

        scheduler = RescanScheduler(0.01, boom)
        with caplog.at_level("ERROR", logger="armorpage.pages"):
            scheduler.trigger()
            assert wait_for(lambda: "Failed to rescan routes" in caplog.text)


class TestRouteCacheModes:
    def test_cache_mode_scans_once(self, blog_routes) -> None:
        cache = RouteCache(blog_routes, mode="cache")
        first = cache.load()
        write_tree(blog_routes, {"new/=page.html": "new"})
        assert cache.load() is first
        assert "/new" not in first.routes

    def test_request_mode_rescans_every_load(self, blog_routes) -> None:
        cache = RouteCache(blog_routes, mode="request")
        first = cache.load()
        write_tree(blog_routes, {"new/=page.html": "new"})
        second = cache.load()
        assert second is not first
        assert "/new" in second.routes

    def test_hybrid_mode_rescans_when_stale(self, blog_routes) -> None:
        clock = FakeClock()
        cache = RouteCache(blog_routes, mode="hybrid", rescan_interval=2.0, clock=clock)
        first = cache.load()

        clock.now += 1.0
        assert cache.load() is first

        clock.now += 1.5
        assert cache.load() is not first

    def test_missing_directory_has_no_snapshot(self, tmp_path) -> None:
        cache = RouteCache(tmp_path / "missing")
        assert cache.load() is None
        assert cache.snapshot is None

    def test_root_is_resolved(self, blog_routes) -> None:
        assert RouteCache(blog_routes).root == blog_routes.resolve()


class TestRouteCacheRescan:
    def test_rescan_replaces_maps(self, blog_routes) -> None:
        cache = RouteCache(blog_routes)
        first = cache.load()
        assert "/about" in first.routes

        (blog_routes / "about" / "=page.html").unlink()
        second = cache.rescan()

        assert second is not first
        assert "/about" not in second.routes
        # The old snapshot is untouched.
        assert "/about" in first.routes

    def test_snapshot_maps_are_read_only(self, blog_routes) -> None:
        snapshot = RouteCache(blog_routes).load()
        with pytest.raises(TypeError):
            snapshot.routes["/x"] = blog_routes  # type: ignore[index]

    def test_removed_directory_clears_snapshot(self, tmp_path) -> None:
        root = write_tree(tmp_path / "routes", {"=page.html": "home"})
        cache = RouteCache(root)
        assert cache.load() is not None

        (root / "=page.html").unlink()
        root.rmdir()
        assert cache.rescan() is None
        assert cache.snapshot is None

    def test_directory_removed_mid_scan_clears_snapshot(self, blog_routes, monkeypatch) -> None:
        cache = RouteCache(blog_routes)
        assert cache.load() is not None

        def gone(routes_dir):
            raise FileNotFoundError(routes_dir)

        monkeypatch.setattr("armorpage.pages.cache.scan_routes", gone)
        assert cache.rescan() is None
        assert cache.snapshot is None

    def test_dynamic_patterns_sorted(self, tmp_path) -> None:
        root = write_tree(
            tmp_path / "routes",
            {"[a]/[b]/=page.html": "", "x/[b]/=page.html": ""},
        )
        snapshot = RouteCache(root).load()
        assert [p.pattern for p in snapshot.dynamic_patterns] == ["/x/:b", "/:a/:b"]


class TestRouteCacheNotify:
    def test_ignores_non_route_files(self, blog_routes) -> None:
        cache = RouteCache(blog_routes)
        assert cache.notify(blog_routes / "style.css") is False
        assert cache.scheduler.pending is False

    def test_burst_of_changes_rescans_once(self, blog_routes) -> None:
        cache = RouteCache(blog_routes, debounce=0.05)
        first = cache.load()
        write_tree(blog_routes, {"new/=page.html": "new"})

        published: list[object] = []
        for _ in range(5):
            assert cache.notify(blog_routes / "new" / "=page.html") is True
            published.append(cache.snapshot)

        # Nothing is rescanned inside the debounce window.
        assert all(snapshot is first for snapshot in published)
        assert wait_for(lambda: cache.snapshot is not first)
        rescanned = cache.snapshot
        time.sleep(0.15)
        assert cache.snapshot is rescanned
        assert "/new" in rescanned.routes

    def test_close_cancels_pending_rescan(self, blog_routes) -> None:
        cache = RouteCache(blog_routes, debounce=0.05)
        first = cache.load()
        cache.notify(blog_routes / "=page.html")
        cache.close()
        time.sleep(0.15)
        assert cache.snapshot is first
