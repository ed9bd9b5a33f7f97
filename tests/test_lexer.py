import pytest
from hypothesis import given
from hypothesis import strategies as st

from texomml.tex_lexer import CharacterStream, Lexer


def lex(source: str) -> Lexer:
    return Lexer(CharacterStream(source, 0, 1, 1))


def test_stream_next_and_peek() -> None:
    cs = CharacterStream("ab")
    assert cs.peek() == "a"
    assert cs.peek(1) == "b"
    assert cs.peek(2) == ""
    assert cs.next() == "a"
    assert cs.current() == "b"
    cs.next()
    assert cs.end_of_file()
    assert cs.current() is None


def test_stream_next_past_end_raises() -> None:
    cs = CharacterStream("")
    with pytest.raises(EOFError):
        cs.next()


def test_stream_tracks_lines_and_columns() -> None:
    cs = CharacterStream("a\nbc")
    for _ in range(3):
        cs.next()
    assert (cs.position, cs.line, cs.column) == (3, 2, 2)


def test_mark_and_reset_restore_all_counters() -> None:
    cs = CharacterStream("x\ny")
    mark = cs.mark()
    cs.next()
    cs.next()
    cs.reset(mark)
    assert cs.mark() == (0, 1, 1)


def test_skip_ignorable_handles_comments() -> None:
    lexer = lex("  % a comment\n  % another\n x")
    lexer.skip_ignorable()
    assert lexer.peek() == "x"


def test_comment_at_end_of_input() -> None:
    lexer = lex("% only")
    lexer.skip_ignorable()
    assert lexer.end_of_file()


def test_match_consumes_only_on_success() -> None:
    lexer = lex("\\\\ x")
    assert not lexer.match("&")
    assert lexer.position == 0
    assert lexer.match("\\\\")
    assert lexer.position == 2


def test_read_control_sequence_letters() -> None:
    lexer = lex("\\alpha2")
    assert lexer.read_control_sequence() == "\\alpha"
    assert lexer.peek() == "2"


def test_read_control_sequence_single_symbol() -> None:
    lexer = lex("\\,x")
    assert lexer.read_control_sequence() == "\\,"
    assert lexer.peek() == "x"


def test_read_control_sequence_none() -> None:
    assert lex("abc").read_control_sequence() is None
    trailing = lex("\\")
    assert trailing.read_control_sequence() is None
    assert trailing.position == 0


def test_peek_control_sequence_does_not_consume() -> None:
    lexer = lex("\\right)")
    assert lexer.peek_control_sequence() == "\\right"
    assert lexer.position == 0


def test_read_until_stops_before_delimiter() -> None:
    lexer = lex("2pt]x")
    assert lexer.read_until("]") == "2pt"
    assert lexer.peek() == "]"


def test_advance_stops_at_eof() -> None:
    lexer = lex("ab")
    assert lexer.advance(5) == "ab"
    assert lexer.end_of_file()


@given(st.text(alphabet=st.characters(whitelist_categories=("Ll", "Lu")), min_size=1))  # type: ignore[misc]
def test_control_sequence_reads_ascii_letter_runs(name: str) -> None:
    lexer = lex("\\" + name)
    cmd = lexer.read_control_sequence()
    assert cmd is not None
    assert cmd.startswith("\\")
    assert lexer.position == len(cmd)
