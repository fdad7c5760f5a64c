"""Template: a parsed template ready for extraction and rendering.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Registry, extractor, config
    ├── _ast: nodes.Template            # Immutable parse result
    └── _name, _source                  # For error messages
    ```

Memory Safety:
Uses ``weakref.ref(env)`` to break potential cycles:
``Template → (weak) → Environment``

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates only local state (output buffer, variable stack)
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any

from tmpldeps.template.builtins import BUILTINS
from tmpldeps.template.executor import Executor
from tmpldeps.template.introspection import TemplateIntrospectionMixin

if TYPE_CHECKING:
    from tmpldeps.environment.core import Environment
    from tmpldeps.nodes import Template as TemplateNode

logger = logging.getLogger(__name__)


class Template(TemplateIntrospectionMixin):
    """Parsed template bound to an Environment.

    Attributes:
        name: Template identifier (for error messages)
        source: Original template text
        ast: Parsed tree

    Methods:
        render(values, **kwargs): Execute with a value environment
        variables(): Names the template depends on
        variables_with_defaults(): Names plus literal defaults

    Error Enhancement:
        Runtime errors carry template context:
            ```
            Runtime Error: key db_host not found
              Location: app.tmpl:3
              Expression: {{get "db_host"}}
              Suggestion: Provide a value for 'db_host', or use getv with a default
            ```

    Example:
            >>> from tmpldeps import Environment
            >>> env = Environment()
            >>> t = env.from_string('port={{getv "port" "8080"}}')
            >>> t.render({"port": "9090"})
            'port=9090'
            >>> t.render(port="")
            'port=8080'

    """

    __slots__ = ("_ast", "_env_ref", "_name", "_source")

    def __init__(
        self,
        env: Environment,
        ast: TemplateNode,
        source: str | None,
        name: str | None = None,
    ):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._ast = ast
        self._source = source
        self._name = name or ast.name

    @property
    def name(self) -> str:
        return self._name

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def ast(self) -> TemplateNode:
        return self._ast

    def render(self, *args: Any, **kwargs: Any) -> str:
        """Render the template against a value environment.

        Args:
            *args: Optional single mapping of values
            **kwargs: Values as keyword arguments (override the mapping)

        Returns:
            Rendered output

        Raises:
            TemplateRuntimeError: Execution failed
        """
        if len(args) > 1:
            raise TypeError(f"render() takes at most 1 positional argument ({len(args)} given)")
        values: dict[str, Any] = {}
        if args:
            values.update(args[0])
        values.update(kwargs)

        env = self._env()
        functions = dict(BUILTINS)
        functions.update(env.registry.render_functions(values))
        executor = Executor(
            self._ast,
            functions,
            source=self._source,
            max_template_depth=env.config.max_template_depth,
        )
        logger.debug(f"Rendering {self._name} with {len(values)} values")
        return executor.execute(values)

    def __repr__(self) -> str:
        return f"<Template {self._name!r}>"
