"""Pattern Templater: expands placeholders in tree roots and glob patterns.

Templates use Jinja2 expression syntax with a fixed function table::

    logs/app-{{ now().strftime("%Y-%m-%d") }}.log
    archive/{{ now().year }}-{{ "%02d" % sub_month(now().month, 1) }}/*.gz

Expansion is re-run on every scrape so time-based patterns follow the clock.
"""

from datetime import datetime
from typing import Callable, Dict

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment


class TemplateExpansionError(Exception):
    """A root or pattern template could not be expanded."""
    pass


def add(a: int, b: int) -> int:
    return a + b


def sub(a: int, b: int) -> int:
    return a - b


def add_month(month: int, n: int) -> int:
    return int(month) + n


def sub_month(month: int, n: int) -> int:
    return int(month) - n


class PatternTemplater:
    """Evaluates template strings against a fixed function table.

    Holds no state between calls other than the clock used by ``now()``.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._env = SandboxedEnvironment(undefined=StrictUndefined, autoescape=False)
        self._functions: Dict[str, Callable] = {
            "now": clock,
            "add": add,
            "sub": sub,
            "add_month": add_month,
            "sub_month": sub_month,
        }

    def expand(self, template: str) -> str:
        """Return ``template`` with every placeholder evaluated.

        Raises:
            TemplateExpansionError: On syntax errors, unknown names or failing calls
        """
        if "{" not in template:
            return template
        try:
            return self._env.from_string(template, globals=self._functions).render()
        except (TemplateError, TypeError, ValueError, ArithmeticError) as e:
            raise TemplateExpansionError(f"{template!r}: {e}") from e
