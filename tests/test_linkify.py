from services.linkify import LinkSegment, TextSegment, tokenize


def test_plain_text_is_one_segment():
    assert tokenize("Read ten pages") == [TextSegment("Read ten pages")]


def test_empty_description():
    assert tokenize("") == []
    assert tokenize(None) == []


def test_links_are_split_out():
    assert tokenize("Docs at https://example.com/a?b=1 and http://x.org") == [
        TextSegment("Docs at "),
        LinkSegment("https://example.com/a?b=1"),
        TextSegment(" and "),
        LinkSegment("http://x.org"),
    ]


def test_trailing_punctuation_stays_text():
    assert tokenize("(see https://example.com).") == [
        TextSegment("(see "),
        LinkSegment("https://example.com"),
        TextSegment(")."),
    ]


def test_markup_is_never_interpreted():
    text = '<script>alert(1)</script> https://evil.example/"><img src=x>'
    segments = tokenize(text)

    assert segments[0] == TextSegment("<script>alert(1)</script> ")
    assert isinstance(segments[1], LinkSegment)
    assert "".join(seg.text for seg in segments) == text


def test_bare_scheme_is_not_a_link():
    assert tokenize("http://.") == [TextSegment("http://.")]


def test_link_without_host_stays_text():
    assert tokenize("see https:///path and http://?q=1") == [
        TextSegment("see https:///path and http://?q=1"),
    ]
