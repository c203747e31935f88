"""Parse pipeline scripts into a stage table, global variables and a run tree.

A script declares stages, variables and an optional title, in any order,
followed by exactly one run block:

    about title: "Exome alignment"
    ref = "hg19.fa"
    align = {
        doc "Align reads against the reference"
        exec "bwa mem $ref $input > $output"
    }
    @Filter("dedup") dedup = { exec "samtools rmdup $input $output"; }
    run { align + dedup }

Parsing uses a Lark LALR grammar; the parse tree is converted into
`stages` namedtuples by `ScriptTransformer`.
"""
import collections

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput, UnexpectedToken, VisitError

from bpipe.log import logger
from bpipe.script import stages
from bpipe.script.errors import MissingRunBlockError, ParseError

GRAMMAR = r"""
start: _item* run_block?

_item: (stage_definition | var_assignment | about_block) ";"?

stage_definition: generator
generator: stage_block
         | stage_filter
         | stage_assignment

stage_block: "{" _statement+ forward_input? "}"
_statement: doc_statement | msg_statement | exec_statement
exec_statement: "exec" STRING ";"?
msg_statement: "msg" STRING ";"?
doc_statement: "doc" (STRING | doc_attribute*)
doc_attribute: _doc_attribute_name ":" STRING ","?
_doc_attribute_name: "title" | "author" | "constraints" | "desc"
forward_input: "forward" "input" ";"?

stage_filter: "{" "filter" "(" STRING ")" generator "}"
            | "@Filter" "(" STRING ")" generator
stage_assignment: NAME "=" generator

var_assignment: NAME "=" STRING
about_block: "about" "title" ":" STRING

run_block: ("Bpipe" "." "run" | "run") "{" serial_queue "}"
serial_queue: _operand ("+" _operand)*
_operand: parallel_queue | stage_reference
parallel_queue: "[" serial_queue ("," serial_queue)* "]"
stage_reference: NAME ("=" NAME)?

STRING: /"[^"]*"/
NAME: /[A-Za-z0-9_]+/

%import common.WS
%ignore WS
"""

ParseResult = collections.namedtuple("ParseResult", "stages variables root title")

_parser = None

def _get_parser():
    global _parser
    if _parser is None:
        _parser = Lark(GRAMMAR, start="start", parser="lalr",
                       maybe_placeholders=False)
    return _parser

class ScriptTransformer(Transformer):
    """Convert a script parse tree into a ParseResult.

    Statements become tagged tuples which `start` sorts into the stage table,
    global variables, title and run tree.
    """
    def STRING(self, token):
        return str(token)[1:-1]

    def NAME(self, token):
        return str(token)

    def exec_statement(self, children):
        return ("exec", children[0])

    def msg_statement(self, children):
        logger.debug("msg: %s" % children[0])
        return ("msg", children[0])

    def doc_attribute(self, children):
        return children[0]

    def doc_statement(self, children):
        logger.debug("doc: %s" % " ".join(children))
        return ("doc", children)

    def forward_input(self, children):
        return ("forward",)

    def stage_block(self, children):
        exec_lines = tuple(x[1] for x in children if x[0] == "exec")
        forward = any(x[0] == "forward" for x in children)
        return stages.Stage(None, exec_lines, None, forward)

    def stage_filter(self, children):
        filter_name, stage = children
        return stage._replace(filter=filter_name)

    def stage_assignment(self, children):
        name, stage = children
        return stage._replace(name=name)

    def generator(self, children):
        return children[0]

    def stage_definition(self, children):
        return ("stage", children[0])

    def var_assignment(self, children):
        name, value = children
        return ("var", name, value)

    def about_block(self, children):
        return ("about", children[0])

    def run_block(self, children):
        return ("run", children[0])

    def serial_queue(self, children):
        return stages.fold(stages.SerialQueue, children)

    def parallel_queue(self, children):
        return stages.fold(stages.ParallelQueue, children)

    def stage_reference(self, children):
        return stages.reference(*children)

    def start(self, children):
        stage_table = {}
        variables = {}
        title = None
        root = None
        for item in children:
            if item[0] == "stage":
                stage = item[1]
                if not stage.name:
                    logger.warning("Ignoring stage without a name: %s" % (stage.exec_lines,))
                    continue
                if stage.name in stage_table:
                    logger.warning("Stage %s defined more than once, using the first definition"
                                   % stage.name)
                    continue
                stage_table[stage.name] = stage
            elif item[0] == "var":
                if item[1] in variables:
                    logger.warning("Variable %s assigned more than once, using the first value"
                                   % item[1])
                    continue
                variables[item[1]] = item[2]
            elif item[0] == "about":
                title = item[1]
            elif item[0] == "run":
                root = item[1]
        if root is None:
            raise MissingRunBlockError()
        return ParseResult(stage_table, variables, root, title)

def _error_position(e, text):
    if isinstance(e, UnexpectedToken) and e.token.type == "$END":
        return len(text)
    pos = getattr(e, "pos_in_stream", None)
    if pos is None or pos < 0:
        return len(text)
    return pos

def _line_column(text, pos):
    line = text.count("\n", 0, pos) + 1
    column = pos - (text.rfind("\n", 0, pos) + 1) + 1
    return line, column

def parse(text):
    """Parse preprocessed script text, returning a ParseResult.

    Raises ParseError with the unconsumed remainder of the script when the
    grammar does not match the full text, and MissingRunBlockError when the
    script has no run block.
    """
    try:
        tree = _get_parser().parse(text)
    except UnexpectedInput as e:
        pos = _error_position(e, text)
        line, column = _line_column(text, pos)
        expected = getattr(e, "expected", None) or getattr(e, "allowed", None)
        raise ParseError(text[pos:], line, column, expected)
    try:
        return ScriptTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, MissingRunBlockError):
            raise e.orig_exc
        raise
