import pytest

from bpipe.script import grammar
from bpipe.script.errors import MissingRunBlockError, ParseError
from bpipe.script.stages import ParallelQueue, SerialQueue, Stage, StageReference


SCRIPT = '''
about title: "Exome alignment"
ref = "hg19.fa"
align = {
    doc "Align reads"
    exec "bwa mem $ref $input > $output";
    exec "samtools index $output"
}
dedup = {
    doc title: "Remove duplicates", author: "lab"
    msg "removing duplicates";
    exec "samtools rmdup $input $output"
    forward input;
}
run { align + dedup }
'''


def test_parses_stages_variables_and_title():
    result = grammar.parse(SCRIPT)
    assert result.title == "Exome alignment"
    assert result.variables == {"ref": "hg19.fa"}
    assert result.stages["align"] == Stage("align",
                                           ("bwa mem $ref $input > $output",
                                            "samtools index $output"),
                                           None, False)
    assert result.stages["dedup"].exec_lines == ("samtools rmdup $input $output",)
    assert result.stages["dedup"].forward_input is True


def test_serial_queue_is_left_folded():
    result = grammar.parse("run { a + b + c }")
    assert result.root == SerialQueue(SerialQueue(StageReference("a", "a"),
                                                  StageReference("b", "b")),
                                      StageReference("c", "c"))


def test_parallel_queue_is_left_folded():
    result = grammar.parse("run { [a, b, c] }")
    assert result.root == ParallelQueue(ParallelQueue(StageReference("a", "a"),
                                                      StageReference("b", "b")),
                                        StageReference("c", "c"))


def test_nested_serial_inside_parallel():
    result = grammar.parse("Bpipe.run { a + [b + c, [d, e]] + f }")
    bc = SerialQueue(StageReference("b", "b"), StageReference("c", "c"))
    de = ParallelQueue(StageReference("d", "d"), StageReference("e", "e"))
    expected = SerialQueue(SerialQueue(StageReference("a", "a"), ParallelQueue(bc, de)),
                           StageReference("f", "f"))
    assert result.root == expected


def test_single_reference():
    assert grammar.parse("run { only }").root == StageReference("only", "only")


def test_aliased_reference():
    result = grammar.parse('a = { exec "touch $output" }\nrun { x = a }')
    assert result.root == StageReference("x", "a")


@pytest.mark.parametrize("text", [
    'sort = @Filter("sort") { exec "sort $input > $output" }\nrun { sort }',
    'sort = { filter("sort") { exec "sort $input > $output" } }\nrun { sort }',
    '@Filter("sort") sort = { exec "sort $input > $output" }\nrun { sort }',
])
def test_filter_forms(text):
    stage = grammar.parse(text).stages["sort"]
    assert stage.filter == "sort"
    assert stage.exec_lines == ("sort $input > $output",)


def test_nested_assignment_uses_outer_name():
    result = grammar.parse('x = y = { exec "echo" }\nrun { x }')
    assert list(result.stages) == ["x"]


def test_unnamed_stage_is_dropped(log_handler):
    result = grammar.parse('{ exec "echo" }\nrun { a }')
    assert result.stages == {}
    assert any("without a name" in r.message for r in log_handler.records)


def test_duplicate_stage_uses_first_definition(log_handler):
    result = grammar.parse('a = { exec "one" }; a = { exec "two" };\nrun { a }')
    assert result.stages["a"].exec_lines == ("one",)
    assert any("Stage a defined more than once" in r.message for r in log_handler.records)


def test_duplicate_variable_uses_first_value(log_handler):
    result = grammar.parse('v = "1"\nv = "2"\nrun { a }')
    assert result.variables == {"v": "1"}
    assert any("Variable v assigned more than once" in r.message
               for r in log_handler.records)


def test_statements_optionally_terminated():
    text = 'a = "1"; b = { exec "x"; }; about title: "t";\nrun { b }'
    result = grammar.parse(text)
    assert result.variables == {"a": "1"}


def test_empty_string_value():
    assert grammar.parse('opts = ""\nrun { a }').variables == {"opts": ""}


def test_trailing_content_after_run_block_fails():
    trailing = 'b = { exec "echo b" }'
    text = 'a = { exec "echo a" }\nrun { a }\n' + trailing
    with pytest.raises(ParseError) as excinfo:
        grammar.parse(text)
    assert excinfo.value.remainder == trailing
    assert excinfo.value.line == 3
    assert excinfo.value.column == 1


def test_second_run_block_fails():
    with pytest.raises(ParseError) as excinfo:
        grammar.parse("run { a }\nrun { b }")
    assert excinfo.value.remainder == "run { b }"


def test_syntax_error_reports_remainder():
    with pytest.raises(ParseError) as excinfo:
        grammar.parse('a = { exec "x" }\nb = { bogus "y" }\nrun { a }')
    assert excinfo.value.remainder == 'bogus "y" }\nrun { a }'
    assert excinfo.value.line == 2


def test_truncated_run_block_fails_at_end():
    with pytest.raises(ParseError) as excinfo:
        grammar.parse("run { a + ")
    assert excinfo.value.remainder == ""


def test_stage_block_requires_a_statement():
    with pytest.raises(ParseError):
        grammar.parse("a = { }\nrun { a }")


@pytest.mark.parametrize("text", ["", "   \n", 'a = { exec "x" }', 'v = "1"'])
def test_missing_run_block(text):
    with pytest.raises(MissingRunBlockError):
        grammar.parse(text)
