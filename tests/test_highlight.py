"""Tests for the pygments lexer."""

from __future__ import annotations

from pygments.token import Comment, Keyword, Name, Number, String

from wattle.highlight import WatLexer


def tokens(source: str) -> list[tuple[object, str]]:
    return [(t, v) for t, v in WatLexer().get_tokens(source) if v.strip()]


class TestWatLexer:
    def test_signature(self):
        toks = tokens("(type $t (func (param $x i32) (result anyfunc)))")
        assert (Keyword.Declaration, "type") in toks
        assert (Keyword.Declaration, "func") in toks
        assert (Name.Variable, "$t") in toks
        assert (Keyword, "param") in toks
        assert (Keyword.Type, "i32") in toks
        assert (Keyword.Type, "anyfunc") in toks

    def test_limits_and_comments(self):
        toks = tokens(";; table\n(table 0x10 20 funcref)")
        assert (Comment.Single, ";; table") in toks
        assert (Number.Hex, "0x10") in toks
        assert (Number.Integer, "20") in toks

    def test_name_annotation(self):
        toks = tokens('(param (@name "first") i32)')
        assert (Name.Decorator, "@name") in toks
        assert (String, "first") in toks
