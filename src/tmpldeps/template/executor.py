"""Tree-walking template executor.

Evaluates a parsed Template against a value environment. Only the render
step uses this module; extraction never executes anything.

Evaluation rules:
    - dot starts as the value environment, ``$`` always names the root
    - ``.a.b`` reads mapping keys or object attributes; a missing mapping
      key is nil, a field of nil is an error
    - each pipeline stage receives the previous result as its last argument
    - ``if``/``with``/``range`` use template truthiness; ``with`` and
      ``range`` rebind dot
    - ``and``/``or`` short-circuit
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from tmpldeps.environment.exceptions import (
    ErrorCode,
    TemplateError,
    TemplateRuntimeError,
    build_source_snippet,
)
from tmpldeps.nodes import (
    Action,
    Bool,
    Break,
    Chain,
    Command,
    Continue,
    Dot,
    Expr,
    Field,
    Identifier,
    If,
    ListNode,
    Nil,
    Node,
    Number,
    Pipe,
    Range,
    String,
    Template,
    TemplateCall,
    Text,
    Variable,
    With,
)
from tmpldeps.template.builtins import truth
from tmpldeps.template.formatting import format_value, sort_key
from tmpldeps.utils.constants import MAX_TEMPLATE_DEPTH

# Marks "no value piped in" (None is a legitimate piped value).
_MISSING = object()


class _BreakLoop(Exception):
    pass


class _ContinueLoop(Exception):
    pass


class _Frame:
    """Variable stack for one template invocation."""

    __slots__ = ("depth", "vars")

    def __init__(self, dot: Any, depth: int = 0):
        self.vars: list[tuple[str, Any]] = [("$", dot)]
        self.depth = depth

    def mark(self) -> int:
        return len(self.vars)

    def pop(self, mark: int) -> None:
        del self.vars[mark:]

    def push(self, name: str, value: Any) -> None:
        self.vars.append((name, value))

    def set(self, name: str, value: Any) -> None:
        for i in range(len(self.vars) - 1, -1, -1):
            if self.vars[i][0] == name:
                self.vars[i] = (name, value)
                return
        raise KeyError(name)

    def set_top(self, n: int, value: Any) -> None:
        self.vars[-n] = (self.vars[-n][0], value)

    def lookup(self, name: str) -> Any:
        for var_name, value in reversed(self.vars):
            if var_name == name:
                return value
        raise KeyError(name)


class Executor:
    """Render one parsed template.

    Args:
        ast: Parsed template (main tree plus defines)
        functions: Callable functions by name, builtins included
        source: Template source for error snippets
        max_template_depth: Ceiling for nested ``{{template}}`` calls
    """

    def __init__(
        self,
        ast: Template,
        functions: Mapping[str, Callable[..., Any]],
        *,
        source: str | None = None,
        max_template_depth: int = MAX_TEMPLATE_DEPTH,
    ) -> None:
        self._ast = ast
        self._name = ast.name
        self._functions = functions
        self._source = source
        self._max_template_depth = max_template_depth
        self._dispatch: dict[type, Callable[[_Frame, Any, Any, list[str]], None]] = {
            Text: self._walk_text,
            Action: self._walk_action,
            ListNode: self._walk_list,
            If: self._walk_if_or_with,
            With: self._walk_if_or_with,
            Range: self._walk_range,
            TemplateCall: self._walk_template,
            Break: self._walk_break,
            Continue: self._walk_continue,
        }

    def execute(self, data: Any) -> str:
        """Render the main tree with ``data`` as dot.

        Raises:
            TemplateRuntimeError: Evaluation failed
        """
        out: list[str] = []
        self._walk_list(_Frame(data), data, self._ast.body, out)
        return "".join(out)

    # ─────────────────────────────────────────────────────────────────────
    # Errors
    # ─────────────────────────────────────────────────────────────────────

    def _error(
        self,
        node: Node,
        message: str,
        code: ErrorCode = ErrorCode.EXECUTION_ERROR,
        suggestion: str | None = None,
    ) -> TemplateRuntimeError:
        snippet = build_source_snippet(self._source, node.lineno) if self._source else None
        return TemplateRuntimeError(
            message,
            expression=f"{{{{{node}}}}}" if isinstance(node, Expr) else None,
            template_name=self._name,
            lineno=node.lineno,
            suggestion=suggestion,
            source_snippet=snippet,
            code=code,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────────────

    def _walk(self, frame: _Frame, dot: Any, node: Node, out: list[str]) -> None:
        handler = self._dispatch.get(type(node))
        if handler is None:
            raise self._error(node, f"unknown node: {type(node).__name__}")
        handler(frame, dot, node, out)

    def _walk_list(self, frame: _Frame, dot: Any, node: ListNode, out: list[str]) -> None:
        for child in node.nodes:
            self._walk(frame, dot, child, out)

    def _walk_text(self, frame: _Frame, dot: Any, node: Text, out: list[str]) -> None:
        out.append(node.data)

    def _walk_action(self, frame: _Frame, dot: Any, node: Action, out: list[str]) -> None:
        value = self._eval_pipeline(frame, dot, node.pipe)
        if not node.pipe.decl:
            out.append(self._print(node.pipe, value))

    def _walk_if_or_with(
        self, frame: _Frame, dot: Any, node: If | With, out: list[str]
    ) -> None:
        mark = frame.mark()
        try:
            value = self._eval_pipeline(frame, dot, node.pipe)
            if truth(value):
                self._walk_list(frame, value if isinstance(node, With) else dot, node.body, out)
            elif node.else_ is not None:
                self._walk_list(frame, dot, node.else_, out)
        finally:
            frame.pop(mark)

    def _walk_range(self, frame: _Frame, dot: Any, node: Range, out: list[str]) -> None:
        mark = frame.mark()
        try:
            value = self._eval_pipeline(frame, dot, node.pipe)
            items = self._range_items(node, value)
            if not items:
                if node.else_ is not None:
                    self._walk_list(frame, dot, node.else_, out)
                return

            decl = node.pipe.decl
            body_mark = frame.mark()
            for key, elem in items:
                if decl:
                    if node.pipe.is_assign:
                        frame.set(decl[0].name, key if len(decl) > 1 else elem)
                        if len(decl) > 1:
                            frame.set(decl[1].name, elem)
                    else:
                        frame.set_top(1, elem)
                        if len(decl) > 1:
                            frame.set_top(2, key)
                try:
                    self._walk_list(frame, elem, node.body, out)
                except _ContinueLoop:
                    pass
                except _BreakLoop:
                    break
                finally:
                    frame.pop(body_mark)
        finally:
            frame.pop(mark)

    def _range_items(self, node: Range, value: Any) -> list[tuple[Any, Any]]:
        if value is None:
            return []
        if isinstance(value, Mapping):
            return [(key, value[key]) for key in sorted(value, key=sort_key)]
        if isinstance(value, bool) or isinstance(value, (str, bytes)):
            raise self._error(node.pipe, f"range can't iterate over {format_value(value)}")
        if isinstance(value, int):
            if len(node.pipe.decl) > 1:
                raise self._error(
                    node.pipe, f"can't use {value} to iterate over more than one variable"
                )
            return [(i, i) for i in range(value)]
        if isinstance(value, Sequence):
            return list(enumerate(value))
        if isinstance(value, Iterable):
            return list(enumerate(value))
        raise self._error(node.pipe, f"range can't iterate over {format_value(value)}")

    def _walk_template(
        self, frame: _Frame, dot: Any, node: TemplateCall, out: list[str]
    ) -> None:
        body = self._ast.defines.get(node.name)
        if body is None:
            raise self._error(
                node,
                f'no such template "{node.name}"',
                suggestion="Define it with {{define \"" + node.name + "\"}}...{{end}}",
            )
        if frame.depth >= self._max_template_depth:
            raise self._error(
                node,
                f"exceeded maximum template depth ({self._max_template_depth})",
                code=ErrorCode.TEMPLATE_DEPTH,
            )
        new_dot = self._eval_pipeline(frame, dot, node.pipe) if node.pipe is not None else None
        self._walk_list(_Frame(new_dot, frame.depth + 1), new_dot, body, out)

    def _walk_break(self, frame: _Frame, dot: Any, node: Break, out: list[str]) -> None:
        raise _BreakLoop

    def _walk_continue(self, frame: _Frame, dot: Any, node: Continue, out: list[str]) -> None:
        raise _ContinueLoop

    def _print(self, node: Pipe, value: Any) -> str:
        if inspect.isroutine(value):
            raise self._error(node, f"can't print {node} of type {type(value).__name__}")
        return format_value(value)

    # ─────────────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────────────

    def _eval_pipeline(self, frame: _Frame, dot: Any, pipe: Pipe) -> Any:
        value: Any = _MISSING
        for cmd in pipe.cmds:
            value = self._eval_command(frame, dot, cmd, value)
        for variable in pipe.decl:
            if pipe.is_assign:
                frame.set(variable.name, value)
            else:
                frame.push(variable.name, value)
        return value

    def _eval_command(self, frame: _Frame, dot: Any, cmd: Command, final: Any) -> Any:
        first = cmd.args[0]
        if isinstance(first, Field):
            return self._eval_field_chain(frame, dot, dot, first, first.ident, cmd.args, final)
        if isinstance(first, Chain):
            return self._eval_chain(frame, dot, first, cmd.args, final)
        if isinstance(first, Identifier):
            return self._eval_function(frame, dot, first, cmd.args, final)
        if isinstance(first, Variable):
            return self._eval_variable(frame, dot, first, cmd.args, final)

        self._not_a_function(cmd, cmd.args, final)
        if isinstance(first, Pipe):
            return self._eval_pipeline(frame, dot, first)
        if isinstance(first, Dot):
            return dot
        if isinstance(first, Nil):
            raise self._error(cmd, "nil is not a command")
        if isinstance(first, (Bool, Number, String)):
            return first.value
        raise self._error(cmd, f"can't evaluate command {first}")

    def _not_a_function(self, node: Node, args: Sequence[Expr], final: Any) -> None:
        if len(args) > 1 or final is not _MISSING:
            raise self._error(node, f"can't give argument to non-function {args[0]}")

    def _eval_arg(self, frame: _Frame, dot: Any, node: Expr) -> Any:
        if isinstance(node, Dot):
            return dot
        if isinstance(node, Nil):
            return None
        if isinstance(node, Field):
            return self._eval_field_chain(frame, dot, dot, node, node.ident, [node], _MISSING)
        if isinstance(node, Variable):
            return self._eval_variable(frame, dot, node, [node], _MISSING)
        if isinstance(node, Pipe):
            return self._eval_pipeline(frame, dot, node)
        if isinstance(node, Identifier):
            return self._eval_function(frame, dot, node, [node], _MISSING)
        if isinstance(node, Chain):
            return self._eval_chain(frame, dot, node, [node], _MISSING)
        if isinstance(node, (Bool, Number, String)):
            return node.value
        raise self._error(node, f"can't handle {node} as an argument")

    def _eval_variable(
        self, frame: _Frame, dot: Any, node: Variable, args: Sequence[Expr], final: Any
    ) -> Any:
        try:
            value = frame.lookup(node.name)
        except KeyError:
            raise self._error(node, f"undefined variable: {node.name}") from None
        if len(node.ident) == 1:
            self._not_a_function(node, args, final)
            return value
        return self._eval_field_chain(frame, dot, value, node, node.ident[1:], args, final)

    def _eval_chain(
        self, frame: _Frame, dot: Any, node: Chain, args: Sequence[Expr], final: Any
    ) -> Any:
        if isinstance(node.node, Nil):
            raise self._error(node, f"indirection through explicit nil in {node}")
        receiver = self._eval_arg(frame, dot, node.node)
        return self._eval_field_chain(frame, dot, receiver, node, node.fields, args, final)

    def _eval_field_chain(
        self,
        frame: _Frame,
        dot: Any,
        receiver: Any,
        node: Expr,
        ident: Sequence[str],
        args: Sequence[Expr],
        final: Any,
    ) -> Any:
        for name in ident[:-1]:
            receiver = self._eval_field(frame, dot, name, node, (), _MISSING, receiver)
        return self._eval_field(frame, dot, ident[-1], node, args, final, receiver)

    def _eval_field(
        self,
        frame: _Frame,
        dot: Any,
        name: str,
        node: Expr,
        args: Sequence[Expr],
        final: Any,
        receiver: Any,
    ) -> Any:
        if receiver is None:
            raise self._error(
                node,
                f"nil pointer evaluating interface {{}}.{name}",
                suggestion="Check that every parent of the field is present",
            )
        has_args = len(args) > 1 or final is not _MISSING
        if isinstance(receiver, Mapping):
            if has_args:
                raise self._error(node, f"{name} is not a method but has arguments")
            return receiver.get(name)
        if name.startswith("_"):
            raise self._error(node, f"{name} is an unexported field of {type(receiver).__name__}")
        try:
            attr = getattr(receiver, name)
        except AttributeError:
            raise self._error(
                node, f"can't evaluate field {name} in type {type(receiver).__name__}"
            ) from None
        if inspect.isroutine(attr):
            call_args = [self._eval_arg(frame, dot, arg) for arg in args[1:]]
            if final is not _MISSING:
                call_args.append(final)
            return self._call(attr, name, node, call_args)
        if has_args:
            raise self._error(node, f"{name} is not a method but has arguments")
        return attr

    def _eval_function(
        self, frame: _Frame, dot: Any, ident: Identifier, args: Sequence[Expr], final: Any
    ) -> Any:
        name = ident.name
        fn = self._functions.get(name)
        if fn is None:
            raise self._error(ident, f'"{name}" is not a defined function')
        if name in ("and", "or"):
            return self._eval_logic(frame, dot, ident, args, final)
        call_args = [self._eval_arg(frame, dot, arg) for arg in args[1:]]
        if final is not _MISSING:
            call_args.append(final)
        return self._call(fn, name, ident, call_args)

    def _eval_logic(
        self, frame: _Frame, dot: Any, ident: Identifier, args: Sequence[Expr], final: Any
    ) -> Any:
        """Short-circuit ``and`` / ``or``: stop at the first deciding operand."""
        stop_when = ident.name == "or"
        operands = args[1:]
        if not operands and final is _MISSING:
            raise self._error(
                ident, f"wrong number of args for {ident.name}: want at least 1 got 0"
            )
        value: Any = None
        for operand in operands:
            value = self._eval_arg(frame, dot, operand)
            if truth(value) == stop_when:
                return value
        return final if final is not _MISSING else value

    def _call(self, fn: Callable[..., Any], name: str, node: Node, args: list[Any]) -> Any:
        try:
            return fn(*args)
        except TemplateError:
            raise
        except Exception as exc:
            raise self._error(
                node, f"error calling {name}: {exc}", code=ErrorCode.FUNCTION_ERROR
            ) from exc

