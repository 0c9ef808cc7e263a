from typing import List
import re

_DOLLAR_TAG = re.compile(r"\$[A-Za-z_]*\$")


def is_comment_only(fragment: str) -> bool:
    """空行と `--` コメント行だけで構成されているか"""
    lines = [line.strip() for line in fragment.splitlines()]
    return all(not line or line.startswith("--") for line in lines)


def split_sql_statements(sql_text: str) -> List[str]:
    """SQLテキストをセミコロンで文単位に分割する

    文字列リテラル、`--` コメント、`$$ ... $$` で囲まれた関数本体の中の
    セミコロンでは分割しない。空の断片とコメントだけの断片は除外する。

    Examples:
        >>> split_sql_statements("create table a (id int);\\n-- done\\n;select 1;")
        ['create table a (id int)', 'select 1']
    """
    statements: List[str] = []
    buf: List[str] = []
    i = 0
    n = len(sql_text)
    in_quote = False
    dollar_tag = None

    while i < n:
        ch = sql_text[i]

        if dollar_tag:
            if sql_text.startswith(dollar_tag, i):
                buf.append(dollar_tag)
                i += len(dollar_tag)
                dollar_tag = None
                continue
            buf.append(ch)
            i += 1
            continue

        if in_quote:
            buf.append(ch)
            if ch == "'":
                # '' はエスケープされた引用符
                if i + 1 < n and sql_text[i + 1] == "'":
                    buf.append("'")
                    i += 2
                    continue
                in_quote = False
            i += 1
            continue

        if ch == "-" and sql_text.startswith("--", i):
            end = sql_text.find("\n", i)
            end = n if end == -1 else end
            buf.append(sql_text[i:end])
            i = end
            continue

        if ch == "'":
            in_quote = True
            buf.append(ch)
            i += 1
            continue

        if ch == "$":
            match = _DOLLAR_TAG.match(sql_text, i)
            if match:
                dollar_tag = match.group(0)
                buf.append(dollar_tag)
                i = match.end()
                continue

        if ch == ";":
            statements.append("".join(buf))
            buf = []
            i += 1
            continue

        buf.append(ch)
        i += 1

    statements.append("".join(buf))
    return [s.strip() for s in statements if s.strip() and not is_comment_only(s)]
