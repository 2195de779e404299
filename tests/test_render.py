import pytest
from hypothesis import given, strategies as st

from litgen.codegen import TextBuilder
from litgen.errors import UndefinedParameter
from litgen.render import Varargs, render, to_text
from litgen.template import compile_template


def _render(pattern: str, **ctx: object) -> str:
    b: TextBuilder = TextBuilder()
    render(compile_template(pattern), ctx, b)
    return b.finish()


def test_hello_world() -> None:
    assert _render("Hello `name`!", name="World") == "Hello World!\n"


def test_undefined_parameter() -> None:
    with pytest.raises(UndefinedParameter) as info:
        _render("Hello `nobody`!")
    assert info.value.name == "nobody"
    assert info.value.kind == "UndefinedParameter"


def test_name_error_inside_helper_is_not_a_parameter_fault() -> None:
    def helper() -> str:
        raise NameError("inner", name="inner")

    with pytest.raises(NameError):
        _render("`helper()`", helper=helper)


def test_context_shadows_scope() -> None:
    b: TextBuilder = TextBuilder()
    render(compile_template("`a`-`b`"), {"a": 1}, b, scope={"a": 0, "b": 2})
    assert b.finish() == "1-2\n"


def test_textual_forms() -> None:
    assert [to_text(v) for v in ("b", 1, True, False, None, 2.5)] == ["b", "1", "true", "false", "", "2.5"]


def test_sequence_values_emit_in_order() -> None:
    assert _render("[`items`]", items=["a", 1, None, False]) == "[a1false]\n"


def test_thunk_runs_against_same_builder() -> None:
    b: TextBuilder = TextBuilder()

    def body() -> None:
        b.indent()
        b.nl()
        b.write("inside")
        b.unindent()

    render(compile_template("{`body`\n}"), {"body": body}, b)
    assert b.finish() == "{\n    inside\n}\n"


def test_statement_segment_shares_render_namespace() -> None:
    assert _render("`x = 2`<`x * 3`>") == "<6>\n"


def test_multiline_value_keeps_indentation() -> None:
    b: TextBuilder = TextBuilder()
    b.indent()
    b.nl()
    render(compile_template("`text`"), {"text": "one\ntwo"}, b)
    assert b.finish() == "\n    one\n    two\n"


def test_varargs_pairs_are_one_based_and_ordered() -> None:
    args: Varargs = Varargs(("b", 1, True, False))
    assert args.n == 4
    assert list(args.pairs()) == [(1, "b"), (2, 1), (3, True), (4, False)]


@given(st.text(alphabet=st.characters(exclude_categories=("Cs", "Cc"))))
def test_render_is_deterministic(name: str) -> None:
    first = _render("Hello `name`!", name=name)
    second = _render("Hello `name`!", name=name)
    assert first == second == f"Hello {name}!\n"
