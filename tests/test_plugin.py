"""
Unit tests for the host adapter.
"""

from fileinclude import FileIncludePlugin, IncludeOptions


class TestFileIncludePlugin:
    """Test the transform and hot-update hooks."""

    def test_transform_index_html(self, site):
        root = site({"nav.html": "<nav>{{ page }}</nav>"})
        plugin = FileIncludePlugin(IncludeOptions(base_dir=root, context={"page": "home"}))
        assert plugin.transform_index_html("<body>@@include('nav.html')</body>") == (
            "<body><nav>home</nav></body>"
        )

    def test_transform_html_only(self, site):
        root = site({"a.tpl": "A"})
        plugin = FileIncludePlugin({"baseDir": root})
        code = "@@include('a.tpl')"
        assert plugin.transform(code, root / "index.html") == "A"
        assert plugin.transform(code, root / "main.js") == code

    def test_transform_detects_self_include(self, site):
        root = site({"index.html": "X@@include('index.html')"})
        plugin = FileIncludePlugin(IncludeOptions(base_dir=root))
        code = (root / "index.html").read_text()
        assert plugin.transform(code, root / "index.html") == "X"

    def test_custom_extensions(self, site):
        root = site({"a.tpl": "A"})
        plugin = FileIncludePlugin(IncludeOptions(base_dir=root, extensions=(".njk", ".html")))
        assert plugin.transform("@@include('a.tpl')", "page.njk") == "A"

    def test_hot_update_full_reload(self):
        plugin = FileIncludePlugin()
        sent = []
        message = plugin.handle_hot_update("/site/partials/nav.html", notify=sent.append)
        assert message == {"type": "full-reload"}
        assert sent == [{"type": "full-reload"}]

    def test_hot_update_ignores_other_files(self):
        plugin = FileIncludePlugin()
        sent = []
        assert plugin.handle_hot_update("/site/style.css", notify=sent.append) is None
        assert sent == []
