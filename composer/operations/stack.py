"""Running the Pulumi engine on the local project through the Automation API."""
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pulumi import automation as auto

from ..errors import ConfigurationError
from ..resources.naming import API_URLS_OUTPUT, UNIT_URL_SUFFIX

OutputHandler = Callable[[str], Any]

_UNIT_INDEX = re.compile(r"-(\d+)" + re.escape(UNIT_URL_SUFFIX) + "$")


class StackRunner:
    """Preview, deploy and destroy one stack of the project in ``project_dir``."""

    def __init__(self, stack_name: str, project_dir: str = ".", debug: bool = False):
        """Initialize the runner.

        Args:
            stack_name: Stack to select, created if it doesn't exist.
            project_dir: Directory holding ``Pulumi.yaml``.
            debug: If True, print verbose debug information.
        """
        self.stack_name = stack_name
        self.project_dir = Path(project_dir).resolve()
        self.debug = debug
        self._stack: Optional[auto.Stack] = None

    @property
    def stack(self) -> auto.Stack:
        if self._stack is None:
            if self.debug:
                print(f"Debug: Selecting stack {self.stack_name} in {self.project_dir}")
            self._stack = auto.create_or_select_stack(
                stack_name=self.stack_name,
                work_dir=str(self.project_dir),
            )
        return self._stack

    def set_function_count(self, count: int) -> None:
        """Persist a new ``function-count`` in the stack configuration."""
        if count < 0:
            raise ConfigurationError(f"function-count must be >= 0, got {count}")
        self.stack.set_config("function-count", auto.ConfigValue(value=str(count)))

    def preview(self, on_output: Optional[OutputHandler] = None) -> auto.PreviewResult:
        return self.stack.preview(on_output=on_output)

    def up(self, on_output: Optional[OutputHandler] = None) -> auto.UpResult:
        return self.stack.up(on_output=on_output)

    def destroy(self, on_output: Optional[OutputHandler] = None) -> auto.DestroyResult:
        return self.stack.destroy(on_output=on_output)

    def outputs(self) -> Dict[str, Any]:
        """Plain values of the stack's current outputs."""
        return {key: output.value for key, output in self.stack.outputs().items()}

    def api_urls(self) -> List[str]:
        return collect_api_urls(self.outputs())


def collect_api_urls(outputs: Dict[str, Any]) -> List[str]:
    """Flatten either output style into one list of URLs in unit order."""
    urls = list(outputs.get(API_URLS_OUTPUT) or [])

    per_unit = [key for key in outputs if key.endswith(UNIT_URL_SUFFIX)]
    per_unit.sort(key=_unit_sort_key)
    urls.extend(outputs[key] for key in per_unit)
    return urls


def _unit_sort_key(key: str):
    match = _UNIT_INDEX.search(key)
    if match:
        return (key[:match.start()], int(match.group(1)))
    return (key, 0)
