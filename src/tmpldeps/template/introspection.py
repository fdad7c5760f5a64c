"""Template introspection mixin.

Adds the dependency-extraction methods to the Template class via mixin
inheritance. Results come from the owning environment's extractor, so they
follow that environment's build variant and registered functions.

"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING

from tmpldeps.analysis.results import unique_names

if TYPE_CHECKING:
    from tmpldeps.analysis.results import VariableInfo
    from tmpldeps.environment.core import Environment
    from tmpldeps.nodes import Template as TemplateNode


class TemplateIntrospectionMixin:
    """Mixin adding variable extraction to Template.

    Requires the host class to define the following slots:
        _ast: TemplateNode
        _env_ref: weakref.ref[Environment]

    """

    if TYPE_CHECKING:
        _ast: TemplateNode
        _env_ref: weakref.ref[Environment]

    def variables(self) -> list[str]:
        """Names the template reads, in source order, duplicates included.

        Example:
            >>> t = env.from_string('{{.host}}:{{getv "port" "80"}}')
            >>> t.variables()
            ['host', 'port']

        Raises:
            ExcessiveNestingError: The tree is nested deeper than the ceiling
        """
        return self._env().extractor.extract_names(self._ast)

    def variables_with_defaults(self) -> list[VariableInfo]:
        """Like variables(), with any literal default attached."""
        return self._env().extractor.extract_with_defaults(self._ast)

    def required_variables(self) -> list[str]:
        """Distinct names in first-seen order."""
        return unique_names(self.variables())

    def _env(self) -> Environment:
        env = self._env_ref()
        if env is None:
            raise RuntimeError("Environment has been garbage collected")
        return env
