"""Property-based tests for the rendering guarantees.

- templates without tags render verbatim
- interpolation escapes exactly the HTML-reserved characters
- list sections render one copy of their body per element, in order
- compiled templates are reused without leaking state between views
"""

from hypothesis import given, settings, strategies as st

from whisker.renderer import Renderer, escape_html

plain_text = st.text().filter(lambda t: "{{" not in t)
names = st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=8)


@given(template=plain_text, view=st.dictionaries(names, st.text()))
def test_tag_free_templates_render_verbatim(template, view):
    assert Renderer().render(template, view) == template


@given(value=st.text())
def test_escaped_output_contains_no_reserved_characters(value):
    out = Renderer().render("{{x}}", {"x": value})
    assert out == escape_html(value)
    assert not set("<>\"'") & set(out)


@given(value=st.text())
def test_unescaped_output_is_verbatim(value):
    assert Renderer().render("{{{x}}}", {"x": value}) == value


@given(items=st.lists(st.integers()))
def test_list_section_preserves_order(items):
    out = Renderer().render("{{#xs}}[{{.}}]{{/xs}}", {"xs": items})
    assert out == "".join(f"[{i}]" for i in items)


@settings(max_examples=50)
@given(views=st.lists(st.dictionaries(names, st.text(alphabet="abc xyz", max_size=5)), min_size=1, max_size=5))
def test_cached_template_renders_each_view_independently(views):
    renderer = Renderer()
    template = "{{#a}}A{{/a}}{{^a}}-{{/a}}{{b}}"
    first = None
    for view in views:
        # Any string, even "", is truthy
        expected = ("A" if "a" in view else "-") + view.get("b", "")
        assert renderer.render(template, view) == expected
        first = first or renderer.compile(template)
        assert renderer.compile(template) is first
