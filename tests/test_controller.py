"""Tests for armorpage.navigation.controller: the navigation state machine."""

import anyio
import pytest

from armorpage.navigation.controller import (
    NAVIGATE_EVENT,
    FetchResult,
    History,
    NavigationController,
    NavState,
    normalize_url,
)
from armorpage.navigation.document import Document

BASE = "http://testserver"


def page(title: str, body: str) -> str:
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


class FakeServer:
    """Serves canned pages; individual URLs can be held back by a gate."""

    def __init__(self, pages: dict[str, str], status: dict[str, int] | None = None) -> None:
        self.pages = pages
        self.status = status or {}
        self.gates: dict[str, anyio.Event] = {}
        self.shielded: set[str] = set()
        self.requests: list[str] = []

    def hold(self, path: str, *, shielded: bool = False) -> anyio.Event:
        gate = anyio.Event()
        self.gates[BASE + path] = gate
        if shielded:
            self.shielded.add(BASE + path)
        return gate

    async def fetch(self, url: str) -> FetchResult:
        self.requests.append(url)
        gate = self.gates.get(url)
        if gate is not None:
            with anyio.CancelScope(shield=url in self.shielded):
                await gate.wait()
        path = url.removeprefix(BASE)
        if path not in self.pages:
            return FetchResult(status=404, text="Not Found", url=url)
        return FetchResult(status=self.status.get(path, 200), text=self.pages[path], url=url)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer(
        {
            "/": page("Home", "<main>home</main>"),
            "/a": page("A", "<main>a</main>"),
            "/b": page("B", "<main>b</main>"),
            "/broken": page("Oops", "error"),
        },
        status={"/broken": 500},
    )


def make_controller(server: FakeServer, fallbacks: list[str] | None = None) -> NavigationController:
    document = Document.parse(server.pages["/"], url=BASE + "/")
    on_fallback = fallbacks.append if fallbacks is not None else None
    return NavigationController(document, server.fetch, on_fallback=on_fallback)


async def wait_in_flight(controller: NavigationController) -> None:
    with anyio.fail_after(1):
        while not controller.in_flight:
            await anyio.sleep(0)


class TestSuccessPath:
    async def test_applies_page(self, server) -> None:
        controller = make_controller(server)
        controller.document.scroll_y = 300

        state = await controller.navigate("/a")

        doc = controller.document
        assert state is NavState.APPLIED
        assert controller.state is NavState.APPLIED
        assert doc.url == BASE + "/a"
        assert doc.title == "A"
        assert doc.body == "<main>a</main>"
        assert doc.scroll_y == 0
        assert controller.history.entries == (BASE + "/", BASE + "/a")
        assert [e.detail for e in doc.events_named(NAVIGATE_EVENT)] == [{"url": BASE + "/a"}]
        assert not controller.in_flight

    async def test_pop_does_not_push(self, server) -> None:
        controller = make_controller(server)
        await controller.pop("/b")
        assert controller.document.title == "B"
        assert controller.history.entries == (BASE + "/",)

    async def test_reload_refetches_without_push(self, server) -> None:
        controller = make_controller(server)
        state = await controller.reload()
        assert state is NavState.APPLIED
        assert server.requests == [BASE + "/"]
        assert controller.history.entries == (BASE + "/",)

    async def test_back_and_forward(self, server) -> None:
        controller = make_controller(server)
        await controller.navigate("/a")
        await controller.navigate("/b")

        assert await controller.back() is NavState.APPLIED
        assert controller.document.title == "A"
        assert await controller.forward() is NavState.APPLIED
        assert controller.document.title == "B"
        assert await controller.forward() is None


class TestSameUrlFastPath:
    async def test_no_fetch(self, server) -> None:
        controller = make_controller(server)
        controller.document.scroll_y = 120
        before = controller.token

        state = await controller.navigate("/")

        assert state is NavState.APPLIED
        assert server.requests == []
        assert controller.token == before + 1
        assert controller.document.scroll_y == 0
        assert controller.document.events_named(NAVIGATE_EVENT)[0].detail == {"url": BASE + "/"}
        assert controller.history.entries == (BASE + "/",)

    async def test_equivalent_url_spellings_take_fast_path(self, server) -> None:
        document = Document.parse(server.pages["/"], url="http://TestServer:80")
        controller = NavigationController(document, server.fetch)

        state = await controller.navigate("http://testserver/")

        assert state is NavState.APPLIED
        assert server.requests == []
        assert controller.document.events_named(NAVIGATE_EVENT)[0].detail == {"url": BASE + "/"}

    async def test_fast_path_cancels_in_flight(self, server) -> None:
        controller = make_controller(server)
        server.hold("/a")
        results: dict[str, NavState] = {}

        async def go() -> None:
            results["a"] = await controller.navigate("/a")

        async with anyio.create_task_group() as tg:
            tg.start_soon(go)
            await wait_in_flight(controller)
            await controller.navigate("/")

        assert results["a"] is NavState.ABORTED
        assert controller.document.title == "Home"


class TestRaces:
    async def test_superseded_fetch_is_cancelled(self, server) -> None:
        controller = make_controller(server)
        server.hold("/a")
        results: dict[str, NavState] = {}

        async def go(path: str) -> None:
            results[path] = await controller.navigate(path)

        async with anyio.create_task_group() as tg:
            tg.start_soon(go, "/a")
            await wait_in_flight(controller)
            await go("/b")

        assert results == {"/a": NavState.ABORTED, "/b": NavState.APPLIED}
        assert controller.state is NavState.APPLIED
        assert controller.document.title == "B"
        assert controller.history.entries == (BASE + "/", BASE + "/b")

    async def test_stale_response_discarded(self, server) -> None:
        controller = make_controller(server)
        gate = server.hold("/a", shielded=True)
        results: dict[str, NavState] = {}

        async def go(path: str) -> None:
            results[path] = await controller.navigate(path)

        async with anyio.create_task_group() as tg:
            tg.start_soon(go, "/a")
            await wait_in_flight(controller)
            await go("/b")
            # The first fetch ignores cancellation and resolves late.
            gate.set()

        assert results == {"/a": NavState.ABORTED, "/b": NavState.APPLIED}
        doc = controller.document
        assert doc.title == "B"
        assert doc.body == "<main>b</main>"
        assert controller.history.entries == (BASE + "/", BASE + "/b")
        assert [e.detail["url"] for e in doc.events_named(NAVIGATE_EVENT)] == [BASE + "/b"]

    async def test_explicit_cancel_aborts(self, server) -> None:
        controller = make_controller(server)
        server.hold("/a")
        results: dict[str, NavState] = {}

        async def go() -> None:
            results["a"] = await controller.navigate("/a")

        async with anyio.create_task_group() as tg:
            tg.start_soon(go)
            await wait_in_flight(controller)
            controller.cancel()

        assert results["a"] is NavState.ABORTED
        assert controller.state is NavState.ABORTED
        assert controller.document.title == "Home"


class TestFailurePath:
    async def test_error_status_falls_back(self, server) -> None:
        fallbacks: list[str] = []
        controller = make_controller(server, fallbacks)

        state = await controller.navigate("/broken")

        assert state is NavState.FAILED_FALLBACK
        assert fallbacks == [BASE + "/broken"]
        assert controller.document.title == "Home"
        assert controller.history.entries == (BASE + "/",)

    async def test_not_found_falls_back(self, server) -> None:
        fallbacks: list[str] = []
        controller = make_controller(server, fallbacks)
        assert await controller.navigate("/missing") is NavState.FAILED_FALLBACK
        assert fallbacks == [BASE + "/missing"]

    async def test_transport_error_falls_back(self) -> None:
        async def offline(url: str) -> FetchResult:
            raise ConnectionError("offline")

        fallbacks: list[str] = []
        controller = NavigationController(
            Document(url=BASE + "/"), offline, on_fallback=fallbacks.append
        )
        assert await controller.navigate("/a") is NavState.FAILED_FALLBACK
        assert fallbacks == [BASE + "/a"]

    async def test_async_fallback_callback(self, server) -> None:
        seen: list[str] = []

        async def on_fallback(url: str) -> None:
            seen.append(url)

        controller = NavigationController(
            Document(url=BASE + "/"), server.fetch, on_fallback=on_fallback
        )
        await controller.navigate("/broken")
        assert seen == [BASE + "/broken"]


class TestHistory:
    def test_push_drops_forward_entries(self) -> None:
        history = History("/")
        history.push("/a")
        history.push("/b")
        history.back()
        history.push("/c")
        assert history.entries == ("/", "/a", "/c")
        assert history.current == "/c"

    def test_back_at_start(self) -> None:
        assert History("/").back() is None
        assert History().current is None


class TestFetchResult:
    @pytest.mark.parametrize(("status", "ok"), [(200, True), (204, True), (302, False), (500, False)])
    def test_ok(self, status: int, ok: bool) -> None:
        assert FetchResult(status=status, text="", url="/").ok is ok


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("http://testserver", "http://testserver/"),
            ("HTTP://TestServer/Blog", "http://testserver/Blog"),
            ("https://example.com:443/a?b=1", "https://example.com/a?b=1"),
            ("http://example.com:8080", "http://example.com:8080/"),
            ("http://user@Example.com/x#top", "http://user@example.com/x#top"),
        ],
    )
    def test_canonical_form(self, url: str, expected: str) -> None:
        assert normalize_url(url) == expected
