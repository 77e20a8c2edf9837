"""Shared fixtures: small routes trees written under ``tmp_path``."""

from pathlib import Path

import pytest


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create *files* (relative path -> text) under *root*."""
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def blog_routes(tmp_path: Path) -> Path:
    """Root page, a dynamic blog post page and two layouts."""
    return write_tree(
        tmp_path / "routes",
        {
            "=layout.html": (
                "<html><head><title>Site</title></head>"
                "<body><header>site</header><!--slot--></body></html>"
            ),
            "=page.html": "<h1>Home</h1>",
            "about/=page.html": "<h1>About</h1>",
            "blog/=layout.html": "<section class=\"blog\"><!--slot--></section>",
            "blog/[slug]/=page.html": "<article>post</article>",
        },
    )
