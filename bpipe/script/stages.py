"""Stages and the composition tree built from a pipeline script.

The composition tree is a closed set of three immutable node types:

  - StageReference: a use of a named stage in the run block. `name` is the
    name used in the run block and drives output naming, `stage_name` is the
    key looked up in the stage table at bind time and `commands` holds the
    resolved command lines once bound.
  - SerialQueue: run `left`, then `right`.
  - ParallelQueue: the `[a, b]` combinator over `left` and `right`.
"""
import collections

Stage = collections.namedtuple("Stage", "name exec_lines filter forward_input")
Stage.__new__.__defaults__ = ((), None, False)

StageReference = collections.namedtuple("StageReference", "name stage_name commands")
StageReference.__new__.__defaults__ = (None, None)

SerialQueue = collections.namedtuple("SerialQueue", "left right")
ParallelQueue = collections.namedtuple("ParallelQueue", "left right")

def reference(name, stage_name=None):
    """Create an unbound reference to a stage, optionally under an alias.
    """
    return StageReference(name, stage_name or name)

def fold(cls, nodes):
    """Left fold a list of nodes into a chain of `cls` queue nodes.
    """
    nodes = list(nodes)
    out = nodes[0]
    for node in nodes[1:]:
        out = cls(out, node)
    return out

def leaves(node):
    """Iterate over stage references in left to right execution order.
    """
    if isinstance(node, StageReference):
        yield node
    elif isinstance(node, (SerialQueue, ParallelQueue)):
        for x in leaves(node.left):
            yield x
        for x in leaves(node.right):
            yield x
    else:
        raise TypeError("Unexpected node in composition tree: %r" % (node,))
