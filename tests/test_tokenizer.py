"""Tests for the tokenizer state machine."""

from __future__ import annotations

import io
import unittest
from contextlib import redirect_stdout

from htmllex import CharSource, LexError, State, Tokenizer, TokenizerOpts, iter_tokens, tokenize
from htmllex.tokens import (
    EOF_TOKEN,
    attribute_name,
    attribute_value,
    end_tag,
    error,
    start_tag,
    text,
)


class FailingStream:
    """Text stream that hands out ``data`` and then fails."""

    def __init__(self, data):
        self.data = data

    def read(self, size=-1):
        if self.data is None:
            raise OSError("disk gone")
        data, self.data = self.data, None
        return data


class TestBasicDocuments(unittest.TestCase):
    def test_empty_input(self) -> None:
        assert tokenize("") == [EOF_TOKEN]

    def test_whitespace_only_input(self) -> None:
        assert tokenize(" \t\n\r\f ") == [EOF_TOKEN]

    def test_empty_element(self) -> None:
        assert tokenize("<div></div>") == [start_tag("div"), end_tag("div"), EOF_TOKEN]

    def test_element_with_text(self) -> None:
        assert tokenize("<div>text</div>") == [
            start_tag("div"),
            text("text"),
            end_tag("div"),
            EOF_TOKEN,
        ]

    def test_element_with_attribute_and_text(self) -> None:
        assert tokenize('<div id="main">Hello</div>') == [
            start_tag("div"),
            attribute_name("id"),
            attribute_value("main"),
            text("Hello"),
            end_tag("div"),
            EOF_TOKEN,
        ]

    def test_element_with_attribute(self) -> None:
        assert tokenize('<div id="main"></div>') == [
            start_tag("div"),
            attribute_name("id"),
            attribute_value("main"),
            end_tag("div"),
            EOF_TOKEN,
        ]

    def test_multiple_attributes(self) -> None:
        assert tokenize('<tag attr1="v1" attr2="v2"><b></b>') == [
            start_tag("tag"),
            attribute_name("attr1"),
            attribute_value("v1"),
            attribute_name("attr2"),
            attribute_value("v2"),
            start_tag("b"),
            end_tag("b"),
            EOF_TOKEN,
        ]

    def test_nested_elements_keep_document_order(self) -> None:
        html = '<div><a><div><a class="hi"></a><b></b></div></a></div>'
        assert tokenize(html) == [
            start_tag("div"),
            start_tag("a"),
            start_tag("div"),
            start_tag("a"),
            attribute_name("class"),
            attribute_value("hi"),
            end_tag("a"),
            start_tag("b"),
            end_tag("b"),
            end_tag("div"),
            end_tag("a"),
            end_tag("div"),
            EOF_TOKEN,
        ]

    def test_whitespace_between_tags_is_not_text(self) -> None:
        html = "<ul>\n  <li>one</li>\n  <li>two</li>\n</ul>\n"
        assert tokenize(html) == [
            start_tag("ul"),
            start_tag("li"),
            text("one"),
            end_tag("li"),
            start_tag("li"),
            text("two"),
            end_tag("li"),
            end_tag("ul"),
            EOF_TOKEN,
        ]

    def test_text_keeps_inner_and_trailing_whitespace(self) -> None:
        assert tokenize("<p>  hello  world  </p>") == [
            start_tag("p"),
            text("hello  world  "),
            end_tag("p"),
            EOF_TOKEN,
        ]

    def test_greater_than_in_text(self) -> None:
        assert tokenize("<p>a > b</p>")[1] == text("a > b")

    def test_identical_input_gives_identical_tokens(self) -> None:
        html = '<section title="x"><h1>Title</h1><p>Body</p></section>'
        assert Tokenizer(html).run() == Tokenizer(html).run()


class TestCaseFolding(unittest.TestCase):
    def test_start_tag_folded_end_tag_verbatim(self) -> None:
        assert tokenize("<DIV>x</DIV>") == [start_tag("div"), text("x"), end_tag("DIV"), EOF_TOKEN]

    def test_mixed_case_start_tag(self) -> None:
        assert tokenize("<TaBle></TaBle>")[0] == start_tag("table")

    def test_only_ascii_letters_are_folded(self) -> None:
        assert tokenize("<\u00c4B></\u00c4B>")[0] == start_tag("\u00c4b")

    def test_attribute_name_and_value_case_preserved(self) -> None:
        tokens = tokenize('<A HREF="Upper"></A>')
        assert tokens[:3] == [start_tag("a"), attribute_name("HREF"), attribute_value("Upper")]

    def test_text_case_preserved(self) -> None:
        assert tokenize("<p>MiXeD</p>")[1] == text("MiXeD")


class TestWhitespace(unittest.TestCase):
    def test_information_separators_are_text(self) -> None:
        assert tokenize("<p>\x1c</p>") == [start_tag("p"), text("\x1c"), end_tag("p"), EOF_TOKEN]

    def test_information_separators_do_not_end_names(self) -> None:
        assert tokenize('<a\x1fb x\x1ey="1"></a\x1fb>') == [
            start_tag("a\x1fb"),
            attribute_name("x\x1ey"),
            attribute_value("1"),
            end_tag("a\x1fb"),
            EOF_TOKEN,
        ]

    def test_unicode_spaces_are_skipped(self) -> None:
        assert tokenize("<p>\u00a0\u2003x</p>")[1] == text("x")

    def test_unicode_space_ends_tag_name(self) -> None:
        assert tokenize('<a\u00a0href="x"></a>')[:2] == [start_tag("a"), attribute_name("href")]


class TestAttributeValues(unittest.TestCase):
    def test_single_quoted_value(self) -> None:
        assert tokenize("<a href='x'></a>")[1:3] == [attribute_name("href"), attribute_value("x")]

    def test_other_quote_inside_value(self) -> None:
        assert tokenize("<a title=\"it's\"></a>")[2] == attribute_value("it's")

    def test_empty_value(self) -> None:
        assert tokenize('<a title=""></a>')[2] == attribute_value("")

    def test_whitespace_before_next_attribute_is_skipped(self) -> None:
        tokens = tokenize('<a x="1"   \n y="2"></a>')
        assert tokens[1:5] == [
            attribute_name("x"),
            attribute_value("1"),
            attribute_name("y"),
            attribute_value("2"),
        ]

    def test_unterminated_value_is_accepted(self) -> None:
        assert tokenize('<a href="x') == [
            start_tag("a"),
            attribute_name("href"),
            attribute_value("x"),
            error("EOF before attribute name"),
        ]

    def test_unterminated_value_rejected_when_configured(self) -> None:
        opts = TokenizerOpts(reject_unterminated_values=True)
        assert tokenize('<a href="x', opts) == [
            start_tag("a"),
            attribute_name("href"),
            error("EOF in attribute value"),
        ]

    def test_terminated_value_unaffected_by_reject_option(self) -> None:
        opts = TokenizerOpts(reject_unterminated_values=True)
        assert tokenize('<a href="x"></a>', opts) == tokenize('<a href="x"></a>')


class TestSelfClosing(unittest.TestCase):
    def test_slash_halts_the_run(self) -> None:
        tokenizer = Tokenizer("<br/><p>after</p>")
        assert tokenizer.run() == [start_tag("br")]
        assert tokenizer.state == State.DONE

    def test_slash_after_attribute_is_an_error(self) -> None:
        assert tokenize('<img src="a"/>') == [
            start_tag("img"),
            attribute_name("src"),
            attribute_value("a"),
            error("Unexpected character before attribute name"),
        ]

    def test_resume_after_self_closing(self) -> None:
        opts = TokenizerOpts(resume_after_self_closing=True)
        assert tokenize("<br/><p>x</p>", opts) == [
            start_tag("br"),
            start_tag("p"),
            text("x"),
            end_tag("p"),
            EOF_TOKEN,
        ]

    def test_resume_requires_greater_than(self) -> None:
        opts = TokenizerOpts(resume_after_self_closing=True)
        assert tokenize("<br/ >", opts) == [start_tag("br"), error("Expected > after /")]

    def test_resume_at_end_of_input(self) -> None:
        opts = TokenizerOpts(resume_after_self_closing=True)
        assert tokenize("<br/", opts) == [start_tag("br"), error("Expected > after /")]


class TestTrailingText(unittest.TestCase):
    def test_trailing_text_is_dropped(self) -> None:
        assert tokenize("<p>hi</p>tail") == [start_tag("p"), text("hi"), end_tag("p"), EOF_TOKEN]

    def test_bare_text_is_dropped(self) -> None:
        assert tokenize("hello") == [EOF_TOKEN]

    def test_trailing_text_emitted_when_configured(self) -> None:
        opts = TokenizerOpts(emit_trailing_text=True)
        assert tokenize("<p>hi</p> tail ", opts) == [
            start_tag("p"),
            text("hi"),
            end_tag("p"),
            text("tail "),
            EOF_TOKEN,
        ]

    def test_whitespace_only_tail_emits_nothing(self) -> None:
        opts = TokenizerOpts(emit_trailing_text=True)
        assert tokenize("<p></p>   ", opts) == [start_tag("p"), end_tag("p"), EOF_TOKEN]


    def test_trailing_text_and_eof_are_pulled_one_at_a_time(self) -> None:
        tokenizer = Tokenizer("<p></p>tail", TokenizerOpts(emit_trailing_text=True))
        tokens = tokenizer.iter_tokens()
        pulled = []
        for _ in range(4):
            pulled.append(next(tokens))
            assert not tokenizer._pending
        assert pulled == [start_tag("p"), end_tag("p"), text("tail"), EOF_TOKEN]
        assert list(tokens) == []


class TestLexErrors(unittest.TestCase):
    def test_lone_less_than(self) -> None:
        assert tokenize("<") == [error("EOF after <")]

    def test_text_then_lone_less_than(self) -> None:
        assert tokenize("abc<") == [text("abc"), error("EOF after <")]

    def test_eof_in_tag_name(self) -> None:
        assert tokenize("<div") == [error("EOF in tag name")]

    def test_empty_angle_brackets(self) -> None:
        assert tokenize("<>") == [error("EOF in tag name")]

    def test_eof_in_end_tag(self) -> None:
        assert tokenize("<p>x</p") == [start_tag("p"), text("x"), error("EOF in end tag")]

    def test_eof_before_attribute_name(self) -> None:
        assert tokenize("<a ") == [start_tag("a"), error("EOF before attribute name")]

    def test_attribute_must_start_with_letter(self) -> None:
        assert tokenize('<a 1="x">') == [start_tag("a"), error("Unexpected character before attribute name")]

    def test_eof_in_attribute_name(self) -> None:
        assert tokenize("<a href") == [start_tag("a"), error("EOF in attribute name")]

    def test_unquoted_value(self) -> None:
        assert tokenize("<a href=x>") == [
            start_tag("a"),
            attribute_name("href"),
            error("Expected quote to open attribute value"),
        ]

    def test_space_around_equals(self) -> None:
        assert tokenize('<a href = "x">') == [
            start_tag("a"),
            attribute_name("href"),
            error("Expected quote to open attribute value"),
        ]

    def test_no_tokens_after_error(self) -> None:
        tokens = tokenize("<a href=x><p>more</p>")
        assert tokens[-1] == error("Expected quote to open attribute value")
        assert sum(1 for token in tokens if token.is_terminal) == 1

    def test_end_tag_kept_verbatim(self) -> None:
        assert tokenize("</div >") == [end_tag("div "), EOF_TOKEN]

    def test_empty_end_tag(self) -> None:
        assert tokenize("</>") == [end_tag(""), EOF_TOKEN]


class TestReadFailures(unittest.TestCase):
    def test_failure_in_tag_name(self) -> None:
        assert tokenize(FailingStream("<di")) == [error("Read failure: disk gone")]

    def test_failure_in_data(self) -> None:
        assert tokenize(FailingStream("<p>hi")) == [start_tag("p"), error("Read failure: disk gone")]

    def test_failure_closes_attribute_value(self) -> None:
        assert tokenize(FailingStream('<a href="x')) == [
            start_tag("a"),
            attribute_name("href"),
            attribute_value("x"),
            error("Read failure: disk gone"),
        ]

    def test_failure_with_rejected_unterminated_values(self) -> None:
        opts = TokenizerOpts(reject_unterminated_values=True)
        assert tokenize(FailingStream('<a href="x'), opts)[-1] == error("Read failure: disk gone")


class TestStrictMode(unittest.TestCase):
    def test_strict_raises_after_error_token(self) -> None:
        tokenizer = Tokenizer("<p>x</p", TokenizerOpts(strict=True))
        with self.assertRaises(LexError) as ctx:
            tokenizer.run()
        assert ctx.exception.message == "EOF in end tag"
        assert ctx.exception.token == error("EOF in end tag")
        assert tokenizer.tokens == [start_tag("p"), text("x"), error("EOF in end tag")]

    def test_strict_lazy_yields_error_then_raises(self) -> None:
        tokens = iter_tokens("<", TokenizerOpts(strict=True))
        assert next(tokens) == error("EOF after <")
        with self.assertRaises(LexError):
            next(tokens)

    def test_strict_valid_input(self) -> None:
        assert tokenize("<p>x</p>", TokenizerOpts(strict=True))[-1] == EOF_TOKEN


class TestLazyTokens(unittest.TestCase):
    def test_lazy_matches_eager(self) -> None:
        html = '<div class="a"><p>One</p><p>Two</p></div><'
        assert list(iter_tokens(html)) == tokenize(html)

    def test_tokenizer_is_iterable(self) -> None:
        assert list(Tokenizer("<b></b>")) == [start_tag("b"), end_tag("b"), EOF_TOKEN]

    def test_tokens_produced_on_demand(self) -> None:
        stream = io.StringIO("<a>" + "x" * 1000 + "</a>")
        tokenizer = Tokenizer(CharSource.from_stream(stream, chunk_size=1))
        tokens = tokenizer.iter_tokens()
        assert next(tokens) == start_tag("a")
        assert stream.tell() == 3
        assert not tokenizer._pending

    def test_stops_after_terminal_token(self) -> None:
        tokens = iter_tokens("<p></p>")
        assert list(tokens) == [start_tag("p"), end_tag("p"), EOF_TOKEN]
        assert list(tokens) == []

    def test_tokenizer_is_single_use(self) -> None:
        tokenizer = Tokenizer("<p></p>")
        tokenizer.run()
        with self.assertRaises(RuntimeError):
            tokenizer.run()
        with self.assertRaises(RuntimeError):
            tokenizer.iter_tokens()


class TestSources(unittest.TestCase):
    def test_text_stream_source(self) -> None:
        assert tokenize(io.StringIO("<p>x</p>")) == [start_tag("p"), text("x"), end_tag("p"), EOF_TOKEN]

    def test_char_source(self) -> None:
        assert tokenize(CharSource("<p></p>")) == [start_tag("p"), end_tag("p"), EOF_TOKEN]

    def test_chunk_boundaries_do_not_matter(self) -> None:
        html = '<div id="main">  Hello  </div>'
        for size in (1, 2, 3, 7):
            source = CharSource.from_stream(io.StringIO(html), chunk_size=size)
            assert tokenize(source) == tokenize(html)

    def test_unsupported_source(self) -> None:
        with self.assertRaises(TypeError):
            Tokenizer(42)


class TestDebugOutput(unittest.TestCase):
    def test_debug_prints_tokens_and_transitions(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            tokenize("<p>x</p>", TokenizerOpts(debug=True))
        output = out.getvalue()
        assert "State: DATA -> TAG_OPEN" in output
        assert "Token: Token(START_TAG, 'p')" in output
        assert "Token: Token(EOF)" in output
        assert "State: DATA -> DONE" in output

    def test_silent_by_default(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            tokenize("<p>x</p>")
        assert out.getvalue() == ""


if __name__ == "__main__":
    unittest.main()
