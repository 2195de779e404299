import pytest

from litgen.errors import UnterminatedDirective
from litgen.scanner import BEGIN_SENTINEL, END_SENTINEL, DirectiveBlock, scan

SRC = f"""int a;
/*!!
t = template('x')
t()
!! 2 */
{BEGIN_SENTINEL}
old
{END_SENTINEL}
int b;
    /*!!
    nl()
    !! 7 */
int c;
"""


def test_scan_finds_blocks_and_spans() -> None:
    blocks: list[DirectiveBlock] = scan(SRC)
    assert len(blocks) == 2
    first, second = blocks

    assert first.script_text == "t = template('x')\nt()\n"
    assert first.declared_line_count == 2
    assert first.actual_line_count == 2
    assert first.line == 2
    start, end = first.generated_span  # type: ignore[misc]
    assert SRC[start:end] == "old\n"
    assert SRC[first.source_span[0]:first.source_span[1]].startswith("/*!!")
    assert SRC[first.source_span[1]:].startswith("int b;")

    assert second.generated_span is None
    assert second.margin == "    "
    assert second.declared_line_count == 7
    assert second.actual_line_count == 1
    assert SRC[second.closer_span[0]:second.closer_span[1]] == "    !! 7 */"
    assert SRC[second.insert_at:] == "int c;\n"


def test_missing_closer_is_unterminated() -> None:
    src = "x\n/*!!\nnl()\n"
    with pytest.raises(UnterminatedDirective) as info:
        scan(src)
    assert info.value.offset == 2
    assert info.value.line == 2


def test_next_opener_before_closer_is_unterminated() -> None:
    src = "/*!!\nnl()\n/*!!\nnl()\n!! 1 */\n"
    with pytest.raises(UnterminatedDirective) as info:
        scan(src)
    assert info.value.offset == 0


def test_missing_end_sentinel_is_unterminated() -> None:
    src = f"// header\n/*!!\nnl()\n!! 1 */\n{BEGIN_SENTINEL}\ngenerated\n"
    with pytest.raises(UnterminatedDirective) as info:
        scan(src)
    assert info.value.offset == len("// header\n")


def test_generated_region_is_not_rescanned() -> None:
    src = f"/*!!\nnl()\n!! 1 */\n{BEGIN_SENTINEL}\n/*!!\n{END_SENTINEL}\n"
    (block,) = scan(src)
    assert block.generated_span is not None


def test_closer_count_is_optional() -> None:
    (block,) = scan("/*!!\nnl()\n!! */\n")
    assert block.declared_line_count is None


def test_no_directives() -> None:
    assert scan("int main() { return 0; }\n") == []


def test_spans_count_characters_not_bytes() -> None:
    prefix = "// größe ✓\n"
    src = prefix + f"/*!!\nnl()\n!! 1 */\n{BEGIN_SENTINEL}\nx\n{END_SENTINEL}\n"
    (block,) = scan(src)
    assert block.source_span[0] == len(prefix)
    start, end = block.generated_span
    assert src[start:end] == "x\n"
