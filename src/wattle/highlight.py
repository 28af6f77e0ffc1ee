"""Pygments lexer for the WebAssembly text format's type grammar."""

from pygments.lexer import RegexLexer, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Punctuation,
    String,
    Text,
)

from wattle.ast_nodes import ValType


class WatLexer(RegexLexer):
    """Pygments lexer for wat type declarations."""

    name = "WebAssembly Text"
    aliases = ["wat", "wast"]
    filenames = ["*.wat", "*.wast"]
    mimetypes = ["text/x-wat"]

    tokens = {
        "root": [
            (r"\s+", Text),
            (r";;.*$", Comment.Single),
            (r"\(;", Comment.Multiline, "blockcomment"),
            (r'"', String, "string"),
            (r"\$[0-9A-Za-z!#$%&'*+\-./:<=>?@\\^_`|~]+", Name.Variable),
            (r"@[0-9A-Za-z!#$%&'*+\-./:<=>?@\\^_`|~]+", Name.Decorator),
            (
                words(
                    ("module", "type", "func", "global", "table", "memory"),
                    prefix=r"(?<=\()",
                    suffix=r"\b",
                ),
                Keyword.Declaration,
            ),
            (
                words(("param", "result", "mut", "shared"), suffix=r"\b"),
                Keyword,
            ),
            (
                words(
                    tuple(vt.value for vt in ValType) + ("anyfunc",),
                    suffix=r"\b",
                ),
                Keyword.Type,
            ),
            (r"[+-]?0x[0-9a-fA-F][0-9a-fA-F_]*", Number.Hex),
            (r"[+-]?[0-9][0-9_]*\.[0-9_]*([eE][+-]?[0-9_]+)?", Number.Float),
            (r"[+-]?[0-9][0-9_]*", Number.Integer),
            (r"[()]", Punctuation),
            (r"[a-z][0-9A-Za-z!#$%&'*+\-./:<=>?@\\^_`|~]*", Name),
        ],
        "blockcomment": [
            (r"[^(;]+", Comment.Multiline),
            (r"\(;", Comment.Multiline, "#push"),
            (r";\)", Comment.Multiline, "#pop"),
            (r"[(;]", Comment.Multiline),
        ],
        "string": [
            (r'\\(u\{[0-9a-fA-F]+\}|[0-9a-fA-F]{2}|[nrt\\\'"])', String.Escape),
            (r'[^"\\]+', String),
            (r'"', String, "#pop"),
        ],
    }
