from pathlib import Path

import pytest

from sigil.errors import (
    RegistryError,
    ShortcodeRenderError,
    UnknownShortcodeError,
)
from sigil.parser import ShortcodeCall, ShortcodeKind
from sigil.protocols import TemplateStore
from sigil.registry import BUILTIN_DIR, ShortcodeRegistry

BUILTINS = ["callout", "contact_form", "figure", "gist", "vimeo", "youtube"]


def _call(name, args=None, body=None):
    kind = ShortcodeKind.INLINE if body is None else ShortcodeKind.BODY
    return ShortcodeCall(name, args or {}, kind, (0, 0), 1, body)


def test_builtins_are_registered():
    registry = ShortcodeRegistry()
    assert registry.names == BUILTINS
    assert len(registry) == len(BUILTINS)
    assert "youtube" in registry
    assert registry.is_known("callout")
    assert not registry.is_known("nope")
    assert registry.origin("gist") == "builtin"
    assert registry.template_path("gist") == BUILTIN_DIR / "gist.html"
    assert isinstance(registry, TemplateStore)


def test_user_templates_extend_and_override(tmp_path):
    (tmp_path / "youtube.html").write_text("custom {{ id }}", encoding="utf-8")
    (tmp_path / "note.html").write_text("<aside>{{ body }}</aside>", encoding="utf-8")
    (tmp_path / "readme.txt").write_text("ignored", encoding="utf-8")

    registry = ShortcodeRegistry(tmp_path)
    assert registry.origin("youtube") == "user"
    assert registry.origin("note") == "user"
    assert "readme" not in registry
    assert registry.template_path("youtube") == tmp_path / "youtube.html"
    assert registry.render(_call("youtube", {"id": "abc"}), "p.md", {}, {}) == "custom abc"


def test_missing_user_directory_is_empty(tmp_path):
    registry = ShortcodeRegistry(tmp_path / "missing")
    assert registry.names == BUILTINS


def test_broken_template_fails_at_load(tmp_path):
    (tmp_path / "broken.html").write_text("{% if %}", encoding="utf-8")
    with pytest.raises(RegistryError) as excinfo:
        ShortcodeRegistry(tmp_path)
    err = excinfo.value
    assert err.source_path == tmp_path / "broken.html"
    assert "shortcode template `broken`" in err.message
    assert "Template syntax error" in err.message


def test_context_has_args_body_page_and_site(tmp_path):
    (tmp_path / "show.html").write_text(
        "{{ n }}|{{ flag }}|{{ body }}|{{ page.title }}|{{ site.title }}",
        encoding="utf-8",
    )
    registry = ShortcodeRegistry(tmp_path)
    out = registry.render(
        _call("show", {"n": 3, "flag": True}, body="text"),
        "p.md",
        {"title": "Page"},
        {"title": "Site"},
    )
    assert out == "3|True|text|Page|Site"


def test_output_is_not_html_escaped(tmp_path):
    (tmp_path / "raw.html").write_text("{{ body }}", encoding="utf-8")
    registry = ShortcodeRegistry(tmp_path)
    assert registry.render(_call("raw", body="<b>&</b>"), "p.md", {}, {}) == "<b>&</b>"


def test_undefined_argument_is_a_render_error():
    registry = ShortcodeRegistry()
    with pytest.raises(ShortcodeRenderError) as excinfo:
        registry.render(_call("youtube"), "post.md", {}, {})
    err = excinfo.value
    assert err.shortcode == "youtube"
    assert "Undefined variable" in err.message
    assert err.original_error is not None


def test_render_unknown_name():
    with pytest.raises(UnknownShortcodeError):
        ShortcodeRegistry().render(_call("nope"), "p.md", {}, {})


def test_markdown_filter(tmp_path):
    (tmp_path / "md.html").write_text("{{ body | markdown }}", encoding="utf-8")
    registry = ShortcodeRegistry(tmp_path)
    out = registry.render(_call("md", body="**bold**"), "p.md", {}, {})
    assert "<strong>bold</strong>" in out


def test_youtube_builtin():
    out = ShortcodeRegistry().expand('{{< youtube(id="dQw4w9WgXcQ", start=30) >}}')
    assert "video-embed-youtube" in out
    assert 'src="https://www.youtube.com/embed/dQw4w9WgXcQ?start=30"' in out
    assert 'title="YouTube video"' in out


def test_vimeo_builtin():
    out = ShortcodeRegistry().expand('{{< vimeo(id=12345, title="Demo") >}}')
    assert "https://player.vimeo.com/video/12345" in out
    assert 'title="Demo"' in out


def test_gist_builtin():
    out = ShortcodeRegistry().expand('{{< gist(user="octo", id="abc", file="a b.py") >}}')
    assert "https://gist.github.com/octo/abc.js?file=a%20b.py" in out


def test_figure_builtin():
    out = ShortcodeRegistry().expand(
        '{{< figure(src="/img/cat.png", caption="A <cat>", width=300) >}}'
    )
    assert 'src="/img/cat.png"' in out
    assert 'alt="A &lt;cat&gt;"' in out
    assert 'width="300"' in out
    assert "<figcaption>A <cat></figcaption>" in out


def test_figure_without_caption():
    out = ShortcodeRegistry().expand('{{< figure(src="/a.png", alt="A") >}}')
    assert 'alt="A"' in out
    assert "figcaption" not in out


def test_callout_builtin_keeps_markdown_body():
    doc = '{{% callout(type="warning", title="Heads up") %}}\n**Careful**\n{{% end %}}'
    out = ShortcodeRegistry().expand(doc)
    assert out.startswith('<div class="callout callout-warning">')
    assert '<p class="callout-title">Heads up</p>' in out
    assert "\n\n**Careful**\n\n</div>" in out


def test_callout_defaults_to_info():
    out = ShortcodeRegistry().expand("{{% callout() %}}x{{% end %}}")
    assert 'class="callout callout-info"' in out


def test_contact_form_without_provider():
    out = ShortcodeRegistry().expand("{{< contact_form() >}}")
    assert '<form class="contact-form" method="POST">' in out
    assert ">Send</button>" in out


def test_contact_form_formspree():
    site = {
        "contact": {
            "provider": "formspree",
            "endpoint": "xyz",
            "redirect": "/thanks",
            "subject": None,
        }
    }
    out = ShortcodeRegistry().expand(
        '{{< contact_form(label="Go") >}}', site_context=site
    )
    assert 'action="https://formspree.io/f/xyz"' in out
    assert 'name="_next" value="/thanks"' in out
    assert 'name="subject"' not in out
    assert ">Go</button>" in out


def test_contact_form_web3forms_and_netlify():
    registry = ShortcodeRegistry()
    web3 = registry.expand(
        "{{< contact_form() >}}",
        site_context={"contact": {"provider": "web3forms", "endpoint": "key-1"}},
    )
    assert 'action="https://api.web3forms.com/submit"' in web3
    assert 'name="access_key" value="key-1"' in web3

    netlify = registry.expand(
        "{{< contact_form() >}}",
        site_context={"contact": {"provider": "netlify", "endpoint": "contact"}},
    )
    assert 'data-netlify="true"' in netlify
    assert 'name="form-name" value="contact"' in netlify


def test_contact_form_embeds():
    registry = ShortcodeRegistry()
    hubspot = registry.expand(
        "{{< contact_form() >}}",
        site_context={"contact": {"provider": "hubspot", "endpoint": "123/abc-def"}},
    )
    assert 'region: "na1"' in hubspot
    assert 'portalId: "123"' in hubspot
    assert 'formId: "abc-def"' in hubspot

    typeform = registry.expand(
        "{{< contact_form() >}}",
        site_context={"contact": {"provider": "typeform", "endpoint": "form-id"}},
    )
    assert 'data-tf-live="form-id"' in typeform


def test_registry_expand_uses_source_path():
    with pytest.raises(UnknownShortcodeError) as excinfo:
        ShortcodeRegistry().expand("{{< nope() >}}", Path("docs/a.md"))
    assert str(excinfo.value).startswith(f"{Path('docs/a.md')}:1:")
