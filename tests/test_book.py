"""Tests for Book, Page and the HTML templates."""

from pathlib import Path

from bookgen.book.book import Book
from bookgen.book.page import MetaValue, Page, urlify
from bookgen.render.templates import TemplateRenderer


def make_book():
    root = Page(notion_id="root", title="Essential Go", book_dir="go")
    a = Page(notion_id="a", title="A <b>", book_dir="go")
    b = Page(notion_id="b", title="B", book_dir="go")
    a1 = Page(notion_id="a1", title="A1", book_dir="go")
    root.pages = [a, b]
    a.pages = [a1]
    for parent, child in ((root, a), (root, b), (a, a1)):
        child.parent = parent
    book = Book(title="Go", dir="go", start_page_id="root")
    book.root_page = root
    book.title_long = root.title
    return book


class TestBook:
    """Tests for Book."""

    def test_defaults(self):
        book = Book(title="Go", dir="go", start_page_id="x")
        assert book.default_lang == "go"
        assert book.url == "/essential/go/"
        assert book.all_pages() == []
        assert book.pages_count == 0

    def test_all_pages_breadth_first(self):
        book = make_book()

        assert [p.notion_id for p in book.all_pages()] == ["root", "a", "b", "a1"]
        assert book.pages_count == 3
        assert book.chapters_count == 2

    def test_all_pages_memoized(self):
        book = make_book()
        first = book.all_pages()
        book.root_page.pages.append(Page(notion_id="c", title="C"))

        assert book.all_pages() is first
        book.invalidate_pages()
        assert len(book.all_pages()) == 5

    def test_dirs(self):
        book = make_book()
        assert book.dest_dir("www") == Path("www/essential/go")
        assert book.output_cache_dir("cache") == Path("cache/go/output")


class TestPage:
    """Tests for Page."""

    def test_urlify(self):
        assert urlify("Hello, World!") == "hello-world"
        assert urlify("C++ & Go") == "c-go"

    def test_meta_helpers(self):
        page = Page(notion_id="p", title="P")
        page.metadata = [
            MetaValue("id", "59"),
            MetaValue("description", "About"),
            MetaValue("search", " a, ,b "),
            MetaValue("color", "blue"),
        ]

        assert page.legacy_id == "59"
        assert page.description == "About"
        assert page.search_synonyms == ["a", "b"]
        assert not page.is_draft
        assert [mv.key for mv in page.unrecognized_metadata] == ["color"]

    def test_parent_is_weak(self):
        parent = Page(notion_id="p", title="P")
        child = Page(notion_id="c", title="C")
        child.parent = parent

        del parent
        assert child.parent is None


class TestTemplateRenderer:
    """Tests for TemplateRenderer."""

    def test_render_page(self):
        book = make_book()
        page = book.root_page.pages[0]
        page.body_html = "<p>Body</p>"
        assets = {"main.css": "/s/main-1.css", "favicon.svg": "/s/favicon-1.svg"}

        html = TemplateRenderer().render_page(book, page, assets)

        assert "<p>Body</p>" in html
        assert "A &lt;b&gt;" in html
        assert '<a href="/essential/go/a1-a1">A1</a>' in html
        assert "/s/main-1.css" in html

    def test_render_index(self):
        html = TemplateRenderer().render_index([make_book()], {"main.css": "", "favicon.svg": ""})
        assert "Essential Go" in html
        assert "2 chapters, 3 pages" in html

    def test_template_dir_override(self, tmp_path):
        (tmp_path / "404.html").write_text("missing {{ book.title }}")

        html = TemplateRenderer(str(tmp_path)).render_template("404.html", book=make_book())
        assert html == "missing Go"
