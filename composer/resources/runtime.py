"""Supported .NET isolated-worker runtimes."""
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class DotNetRuntime:
    """Site config values selecting a runtime on the Function App."""
    net_framework_version: str
    linux_fx_version: str


class DotNetVersion(str, Enum):
    V8 = "v8"
    V9 = "v9"

    @classmethod
    def parse(cls, tag: str) -> "DotNetVersion":
        """Look up a version from a config tag such as ``v8`` or ``V8``.

        Raises:
            ValueError: If the tag names no supported version.
        """
        try:
            return cls(tag.strip().lower())
        except ValueError:
            supported = ", ".join(v.value for v in cls)
            raise ValueError(f"Unsupported runtime version '{tag}' (expected one of: {supported})")

    @property
    def runtime(self) -> DotNetRuntime:
        return _RUNTIMES[self]

    @property
    def net_framework_version(self) -> str:
        return self.runtime.net_framework_version

    @property
    def linux_fx_version(self) -> str:
        return self.runtime.linux_fx_version


_RUNTIMES = {
    DotNetVersion.V8: DotNetRuntime(
        net_framework_version="v8.0",
        linux_fx_version="DOTNET-ISOLATED|8.0",
    ),
    DotNetVersion.V9: DotNetRuntime(
        net_framework_version="v9.0",
        linux_fx_version="DOTNET-ISOLATED|9.0",
    ),
}
