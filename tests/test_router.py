"""Tests for armorpage.routing.router: specificity-ordered matching."""

from armorpage.routing.route import RoutePattern
from armorpage.routing.router import (
    Router,
    normalize_path,
    sort_dynamic_patterns,
    specificity_key,
    split_path,
)


class TestNormalizePath:
    def test_root_stays(self) -> None:
        assert normalize_path("/") == "/"

    def test_empty_is_root(self) -> None:
        assert normalize_path("") == "/"

    def test_trailing_slash_dropped(self) -> None:
        assert normalize_path("/blog/") == "/blog"

    def test_split_ignores_empty_parts(self) -> None:
        assert split_path("/blog//hello/") == ["blog", "hello"]


class TestSpecificityOrder:
    def test_fewer_params_first(self) -> None:
        ordered = sort_dynamic_patterns(["/:a/:b", "/x/:b"])
        assert [p.pattern for p in ordered] == ["/x/:b", "/:a/:b"]
        assert specificity_key(RoutePattern.parse("/x/:b")) < specificity_key(RoutePattern.parse("/:a/:b"))

    def test_more_literals_first(self) -> None:
        ordered = sort_dynamic_patterns(["/a/:x", "/a/:x/b"])
        assert ordered[0].pattern == "/a/:x/b"

    def test_pattern_string_breaks_full_tie(self) -> None:
        first = RoutePattern.parse("/a/:x")
        second = RoutePattern.parse("/:y/a")
        # Same counts everywhere: the pattern string decides.
        assert [p.pattern for p in sort_dynamic_patterns([first, second])] == ["/:y/a", "/a/:x"]

    def test_lexicographic_final_tie_break(self) -> None:
        ordered = sort_dynamic_patterns(["/b/:x", "/a/:x"])
        assert [p.pattern for p in ordered] == ["/a/:x", "/b/:x"]

    def test_order_independent_of_registration(self) -> None:
        patterns = ["/:a/:b", "/x/:b", "/x/y/:c", "/:z"]
        forward = [p.pattern for p in sort_dynamic_patterns(patterns)]
        backward = [p.pattern for p in sort_dynamic_patterns(reversed(patterns))]
        assert forward == backward


class TestRouterMatch:
    def test_scenario_dynamic_and_root(self) -> None:
        router = Router({"/": "home", "/blog/:slug": "post"})

        match = router.match("/blog/hello")
        assert match is not None
        assert match.pattern == "/blog/:slug"
        assert match.params == {"slug": "hello"}
        assert match.target == "post"

        root = router.match("/")
        assert root is not None
        assert root.pattern == "/"
        assert root.params == {}

    def test_static_beats_dynamic(self) -> None:
        router = Router({"/blog/:slug": "post", "/blog/new": "new"})
        match = router.match("/blog/new")
        assert match is not None
        assert match.target == "new"
        assert match.params == {}

    def test_static_wins_regardless_of_registration_order(self) -> None:
        router = Router({"/blog/new": "new", "/blog/:slug": "post"})
        assert router.match("/blog/new").target == "new"

    def test_fewer_params_tried_first(self) -> None:
        router = Router({"/:section/:slug": "generic", "/blog/:slug": "blog"})
        assert router.match("/blog/x").target == "blog"
        assert router.match("/news/x").target == "generic"

    def test_trailing_slash_normalized(self) -> None:
        router = Router({"/about": "about"})
        assert router.match("/about/").target == "about"

    def test_no_match_returns_none(self) -> None:
        router = Router({"/": "home", "/blog/:slug": "post"})
        assert router.match("/blog") is None
        assert router.match("/blog/a/b") is None

    def test_param_binds_any_literal(self) -> None:
        router = Router({"/:x": "any"})
        for value in ("a", "hello-world", "42", "%E2%9C%93"):
            assert router.match(f"/{value}").params == {"x": value}

    def test_dynamic_patterns_exposed_in_order(self) -> None:
        router = Router({"/": 0, "/:a/:b": 1, "/x/:b": 2})
        assert [p.pattern for p in router.dynamic_patterns] == ["/x/:b", "/:a/:b"]

    def test_container_protocol(self) -> None:
        router = Router({"/": 0, "/a": 1})
        assert len(router) == 2
        assert "/a" in router
        assert sorted(router) == ["/", "/a"]
