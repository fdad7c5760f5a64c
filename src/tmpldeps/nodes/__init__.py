"""Template AST node types.

The tree is produced once per parse and never modified afterwards.

Node kinds relevant to dependency extraction:
    Field, Command, Action, Pipe, ListNode, If, Range, With

Leaf kinds (never a dependency on their own):
    Text, String, Number, Bool, Nil, Dot, Variable, Identifier,
    Chain, TemplateCall, Break, Continue
"""

from tmpldeps.nodes.base import Node
from tmpldeps.nodes.control_flow import BranchNode, Break, Continue, If, Range, With
from tmpldeps.nodes.expressions import (
    Bool,
    Chain,
    Command,
    Dot,
    Expr,
    Field,
    Identifier,
    Nil,
    Number,
    Pipe,
    String,
    Variable,
)
from tmpldeps.nodes.structure import Action, ListNode, Template, TemplateCall, Text

__all__ = [
    "Action",
    "Bool",
    "BranchNode",
    "Break",
    "Chain",
    "Command",
    "Continue",
    "Dot",
    "Expr",
    "Field",
    "Identifier",
    "If",
    "ListNode",
    "Nil",
    "Node",
    "Number",
    "Pipe",
    "Range",
    "String",
    "Template",
    "TemplateCall",
    "Text",
    "Variable",
    "With",
]
