"""Test environment configuration: loading, caching, filters and components."""

import gc
import logging

import pytest

from vuepy import (
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateNotFoundError,
    UnknownFilterError,
    register_filter,
)
from vuepy.environment import default_registry


class TestLoading:
    """get_template / from_string / render."""

    def test_from_string(self, env):
        assert env.from_string("<b>{{ x }}</b>").render(x=1) == "<b>1</b>"

    def test_mapping_argument(self, env):
        assert env.from_string("{{ a }}{{ b }}").render({"a": 1}, b=2) == "12"

    def test_keyword_wins_over_mapping(self, env):
        assert env.from_string("{{ a }}").render({"a": 1}, a=2) == "2"

    def test_bad_positional_arguments(self, env):
        with pytest.raises(TypeError):
            env.from_string("x").render(1, 2)

    def test_get_template_suffix_retry(self, env_with_loader):
        template = env_with_loader.get_template("badge")
        assert template.name == "badge.html"

    def test_get_template_missing(self, env_with_loader):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            env_with_loader.get_template("bagde.html")
        assert exc_info.value.suggestion == "Did you mean 'badge.html'?"

    def test_no_loader(self, env):
        with pytest.raises(TemplateNotFoundError, match="no loader configured"):
            env.get_template("x.html")

    def test_has_template(self, env_with_loader, env):
        assert env_with_loader.has_template("card.html")
        assert not env_with_loader.has_template("card")
        assert not env.has_template("card.html")

    def test_list_templates(self, env_with_loader, env):
        assert env_with_loader.list_templates() == [
            "badge.html",
            "card.html",
            "list.html",
            "page.html",
        ]
        assert env.list_templates() == []

    def test_render_tree(self, env):
        nodes = env.from_string('<p v-if="ok">x</p>').render_tree(ok=True)
        assert [node.tag for node in nodes] == ["p"]

    def test_file_system_loader(self, tmp_path):
        (tmp_path / "layouts").mkdir()
        (tmp_path / "layouts" / "base.html").write_text("<html>{{ content }}</html>")
        (tmp_path / "index.html").write_text(
            '---\ntitle: Home\n---\n<h1>{{ title }}</h1><i v-for="n in 2">{{ n }}</i>'
        )
        env = Environment(loader=FileSystemLoader(tmp_path))
        assert env.render("index.html") == "<html><h1>Home</h1><i>1</i><i>2</i></html>"
        assert env.get_template("index.html").filename == str(tmp_path / "index.html")


class TestCache:
    """Template cache behaviour."""

    def test_templates_are_cached(self, env_with_loader):
        first = env_with_loader.get_template("card.html")
        assert env_with_loader.get_template("card.html") is first
        info = env_with_loader.cache_info()
        assert (info["hits"], info["misses"], info["size"]) == (1, 1, 1)

    def test_from_string_not_cached(self, env):
        env.from_string("x")
        assert env.cache_info()["size"] == 0

    def test_lru_eviction(self):
        env = Environment(loader=DictLoader({f"{i}.html": str(i) for i in range(3)}), cache_size=2)
        env.get_template("0.html")
        env.get_template("1.html")
        env.get_template("0.html")
        env.get_template("2.html")
        assert env.cache_info()["size"] == 2
        env.get_template("0.html")
        assert env.cache_info()["hits"] == 2

    def test_clear_cache(self, env_with_loader):
        env_with_loader.get_template("card.html")
        env_with_loader.clear_cache()
        assert env_with_loader.cache_info() == {"size": 0, "max_size": 400, "hits": 0, "misses": 0}

    def test_cache_miss_logged(self, env_with_loader, caplog):
        with caplog.at_level(logging.DEBUG, logger="vuepy.environment.core"):
            env_with_loader.get_template("badge.html")
        assert "Template cache miss: badge.html" in caplog.text

    def test_template_outliving_environment(self):
        template = Environment().from_string("x")
        gc.collect()
        with pytest.raises(RuntimeError, match="garbage collected"):
            template.render()


class TestFilters:
    """Filter registration."""

    def test_add_filter(self, env):
        env.add_filter("double", lambda v: v * 2)
        assert env.from_string("{{ 4 | double }}").render() == "8"

    def test_filter_decorator(self, env):
        @env.filter()
        def shout(value: str) -> str:
            return value.upper() + "!"

        @env.filter("whisper")
        def _quiet(value: str) -> str:
            return value.lower()

        assert env.from_string("{{ 'a' | shout }} {{ 'B' | whisper }}").render() == "A! b"

    def test_filters_are_per_environment(self, env):
        env.add_filter("only_here", lambda v: v)
        other = Environment()
        with pytest.raises(UnknownFilterError):
            other.from_string("{{ 1 | only_here }}").render()

    def test_constructor_filters(self):
        env = Environment(filters={"twice": lambda v: [v, v]})
        assert env.from_string("{{ 1 | twice }}").render() == "[1,1]"

    def test_override_builtin(self, env):
        env.add_filter("upper", lambda v: "custom")
        assert env.from_string("{{ 'a' | upper }}").render() == "custom"
        assert Environment().from_string("{{ 'a' | upper }}").render() == "A"

    def test_register_filter_is_global(self):
        register_filter("global_marker", lambda v: "marked")
        try:
            assert Environment().from_string("{{ 1 | global_marker }}").render() == "marked"
        finally:
            del default_registry["global_marker"]


class TestComponents:
    def test_register_component_lowercases(self, env):
        env.register_component("MyCard", "card.html")
        assert env.components == {"mycard": "card.html"}

    def test_repr(self, env, env_with_loader):
        assert repr(env) == "<Environment loader=None>"
        assert repr(env_with_loader) == "<Environment loader=DictLoader>"
        assert repr(env.from_string("x")) == "<Template (inline)>"
