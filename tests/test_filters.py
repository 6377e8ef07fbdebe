"""Tests for thicket.codegen.filters: re-indenting pages of code."""

from thicket.codegen.filters import code_block, module_code, pyrepr, string_continuation_lines


class TestCodeBlock:
    def test_indents_each_code_line(self) -> None:
        assert code_block("a = 1\nb = 2\n") == "    a = 1\n    b = 2"

    def test_blank_page_becomes_pass(self) -> None:
        assert code_block("\n  \n") == "    pass"

    def test_common_margin_is_replaced(self) -> None:
        source = "\n        if True:\n            ctx['a'] = 1\n"
        assert code_block(source) == "    if True:\n        ctx['a'] = 1"

    def test_multiline_string_is_kept_verbatim(self) -> None:
        source = 'ctx["x"] = """line1\nline2"""\n'
        assert code_block(source) == '    ctx["x"] = """line1\nline2"""'

    def test_string_lines_do_not_count_toward_margin(self) -> None:
        source = "        if True:\n            s = '''a\n  b'''\n"
        assert code_block(source) == "    if True:\n        s = '''a\n  b'''"

    def test_multiline_fstring_is_kept_verbatim(self) -> None:
        source = 'name = "x"\nctx["x"] = f"""{name}\n  tail"""\n'
        assert code_block(source) == '    name = "x"\n    ctx["x"] = f"""{name}\n  tail"""'

    def test_blank_lines_stay_empty(self) -> None:
        assert code_block("a = 1\n   \nb = 2") == "    a = 1\n\n    b = 2"


class TestModuleCode:
    def test_dedents_and_ends_with_newline(self) -> None:
        assert module_code("\n    import os\n    x = 1\n") == "import os\nx = 1\n"

    def test_empty_page(self) -> None:
        assert module_code("\n\n") == ""

    def test_docstring_body_is_kept(self) -> None:
        source = '    """Doc\n        indented\n    """\n    import os\n'
        assert module_code(source) == '"""Doc\n        indented\n    """\nimport os\n'


class TestStringContinuationLines:
    def test_single_line_strings_are_not_continuations(self) -> None:
        assert string_continuation_lines("a = 'x'\nb = \"y\"\n") == frozenset()

    def test_marks_lines_after_the_opening_line(self) -> None:
        source = 'a = """one\ntwo\nthree"""\nb = 1\n'
        assert string_continuation_lines(source) == frozenset({2, 3})

    def test_untokenizable_source_does_not_raise(self) -> None:
        assert string_continuation_lines('a = """never closed\n') == frozenset()


def test_pyrepr_is_a_python_literal() -> None:
    assert pyrepr("it's\n") == '"it\'s\\n"'
