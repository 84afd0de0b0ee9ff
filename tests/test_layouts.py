"""Tests for front matter and layout chains."""

from pathlib import Path

import pytest

from vuepy import (
    DictLoader,
    Environment,
    FileSystemLoader,
    ResourceLimitError,
    TemplateNotFoundError,
)
from vuepy.environment.exceptions import ErrorCode
from vuepy.template.components import resolve_layout_name


def make_env(templates: dict[str, str], **kwargs) -> Environment:
    return Environment(loader=DictLoader(templates), **kwargs)


class TestFrontMatter:
    def test_variables_are_defaults(self):
        env = make_env({"p.html": "---\ntitle: Default\n---\n<h1>{{ title }}</h1>"})
        template = env.get_template("p.html")
        assert template.render() == "<h1>Default</h1>"
        assert template.render(title="Given") == "<h1>Given</h1>"

    def test_properties(self):
        env = make_env({"p.html": "---\nlayout: post\ntitle: T\n---\n<p></p>"})
        template = env.get_template("p.html")
        assert template.layout == "post"
        assert template.variables == {"title": "T"}
        assert template.front_matter == {"layout": "post", "title": "T"}

    def test_front_matter_is_not_rendered(self, env):
        assert env.from_string("---\na: 1\n---\n<p>{{ a }}</p>").render() == "<p>1</p>"


class TestLayouts:
    def test_named_layout_wraps_content(self):
        env = make_env(
            {
                "layouts/post.html": "<article>{{ content }}</article>",
                "page.html": "---\nlayout: post\n---\n<p>Body & more</p>",
            }
        )
        assert env.render("page.html") == "<article><p>Body &amp; more</p></article>"

    def test_layout_sees_page_data_and_front_matter(self):
        env = make_env(
            {
                "layouts/post.html": "<title>{{ title }} | {{ site }}</title>{{ content }}",
                "page.html": "---\nlayout: post\ntitle: Hello\n---\n<p>x</p>",
            }
        )
        assert env.render("page.html", site="S") == "<title>Hello | S</title><p>x</p>"

    def test_layout_v_html_content(self):
        env = make_env(
            {
                "layouts/base.html": '<main v-html="content"></main>',
                "page.html": "<p>x</p>",
            }
        )
        assert env.render("page.html") == "<main><p>x</p></main>"

    def test_default_layout_applied_when_present(self):
        env = make_env(
            {
                "layouts/base.html": "<body>{{ content }}</body>",
                "page.html": "<p>x</p>",
            }
        )
        assert env.render("page.html") == "<body><p>x</p></body>"

    def test_default_layout_not_applied_to_itself(self):
        env = make_env({"layouts/base.html": "<body>{{ content }}</body>"})
        assert env.render("layouts/base.html") == "<body></body>"

    def test_default_layout_disabled(self):
        env = make_env(
            {"layouts/base.html": "<body>{{ content }}</body>", "page.html": "<p>x</p>"},
            default_layout=None,
        )
        assert env.render("page.html") == "<p>x</p>"

    def test_render_fragment_skips_layout(self):
        env = make_env(
            {"layouts/base.html": "<body>{{ content }}</body>", "page.html": "<p>x</p>"}
        )
        assert env.get_template("page.html").render_fragment() == "<p>x</p>"

    def test_layout_chain(self):
        env = make_env(
            {
                "layouts/base.html": "<html>{{ content }}</html>",
                "layouts/post.html": "---\nlayout: base\n---\n<article>{{ content }}</article>",
                "page.html": "---\nlayout: post\n---\n<p>x</p>",
            }
        )
        assert env.render("page.html") == "<html><article><p>x</p></article></html>"

    def test_layout_relative_to_page(self):
        env = make_env(
            {
                "blog/wrap.html": "<div class='blog'>{{ content }}</div>",
                "blog/entry.html": "---\nlayout: wrap\n---\n<p>x</p>",
            }
        )
        assert env.render("blog/entry.html") == '<div class="blog"><p>x</p></div>'

    def test_layout_slots_from_page(self):
        env = make_env(
            {
                "layouts/base.html": (
                    '<head><slot name="head"><title>Default</title></slot></head>'
                    "<body>{{ content }}</body>"
                ),
                "page.html": (
                    "<template #head><title>{{ title }}</title></template><p>x</p>"
                ),
            }
        )
        assert env.render("page.html", title="T") == (
            "<head><title>T</title></head><body><p>x</p></body>"
        )

    def test_layout_slot_fallback(self):
        env = make_env(
            {
                "layouts/base.html": '<head><slot name="head"><title>D</title></slot></head>',
                "page.html": "<p>x</p>",
            }
        )
        assert env.render("page.html") == "<head><title>D</title></head>"

    def test_missing_named_layout(self):
        env = make_env({"page.html": "---\nlayout: nope\n---\n<p>x</p>"})
        with pytest.raises(TemplateNotFoundError):
            env.render("page.html")

    def test_circular_layouts(self):
        env = make_env(
            {
                "layouts/a.html": "---\nlayout: b\n---\n{{ content }}",
                "layouts/b.html": "---\nlayout: a\n---\n{{ content }}",
                "page.html": "---\nlayout: a\n---\nx",
            },
            max_layout_depth=5,
        )
        with pytest.raises(ResourceLimitError) as exc_info:
            env.render("page.html")
        assert exc_info.value.code == ErrorCode.LAYOUT_DEPTH


class TestResolveLayoutName:
    def test_candidates(self):
        env = make_env({"layouts/base.html": "", "docs/side.html": "", "root.html": ""})
        assert resolve_layout_name(env, "base", "page.html") == "layouts/base.html"
        assert resolve_layout_name(env, "side", "docs/page.html") == "docs/side.html"
        assert resolve_layout_name(env, "root.html", "docs/page.html") == "root.html"

    def test_unresolved_returns_last_candidate(self):
        env = make_env({})
        assert resolve_layout_name(env, "x", None) == "layouts/x.html"


class TestMissingDefaultLayout:
    """Pages without a layout do not rescan the loader on every render."""

    def test_repeated_renders_do_not_walk_the_tree(self, tmp_path, monkeypatch):
        for n in range(50):
            (tmp_path / f"p{n}.html").write_text(f"<p>{n}</p>")
        env = Environment(loader=FileSystemLoader(tmp_path))
        template = env.get_template("p1.html")

        walks = []
        original = Path.rglob

        def counting_rglob(self, pattern, *args, **kwargs):
            walks.append(self)
            return original(self, pattern, *args, **kwargs)

        monkeypatch.setattr(Path, "rglob", counting_rglob)
        for _ in range(10):
            assert template.render() == "<p>1</p>"
        assert walks == []

    def test_miss_is_remembered_until_cache_cleared(self):
        templates = {"page.html": "<p>x</p>"}
        env = make_env(templates)
        assert env.render("page.html") == "<p>x</p>"

        templates["layouts/base.html"] = "<main>{{ content }}</main>"
        assert env.render("page.html") == "<p>x</p>"

        env.clear_cache()
        assert env.render("page.html") == "<main><p>x</p></main>"
