"""
Central registry for subcommands of the top-level user command.

Each subcommand is a `SubcommandSpec` holding its handler, an optional
argument completer and a one-line description. A `SubcommandRegistry` is built
once when the command is set up and is read-only afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import RegistryError


@dataclass(frozen=True, slots=True)
class CommandOpts:
    """Options the host passes along with the argument tokens."""
    name: str
    args: str = ""
    fargs: List[str] = field(default_factory=list)
    bang: bool = False


Handler = Callable[[List[str], CommandOpts], None]
ArgCompleter = Callable[[str], List[str]]


@dataclass(frozen=True, slots=True)
class SubcommandSpec:
    invoke: Handler
    complete_args: Optional[ArgCompleter] = None
    description: str = ""


def substring_matches(lead: str, candidates: Iterable[str]) -> List[str]:
    """Candidates containing *lead* (case-sensitive), in their original order."""
    return [c for c in candidates if lead in c]


class SubcommandRegistry(Mapping[str, SubcommandSpec]):
    """
    Ordered, read-only mapping of subcommand name -> `SubcommandSpec`.

    Keys must be non-empty, whitespace-free and unique. Iteration follows
    insertion order, which only matters for completion listings.
    """

    __slots__ = ("_specs",)

    def __init__(
        self,
        specs: Union[Mapping[str, SubcommandSpec], Iterable[Tuple[str, SubcommandSpec]]] = (),
    ) -> None:
        items = specs.items() if isinstance(specs, Mapping) else specs
        table: Dict[str, SubcommandSpec] = {}
        for name, spec in items:
            if not isinstance(name, str) or not name:
                raise RegistryError(f"Subcommand name must be a non-empty string, got {name!r}")
            if any(ch.isspace() for ch in name):
                raise RegistryError(f"Subcommand name may not contain whitespace: {name!r}")
            if name in table:
                raise RegistryError(f"Duplicate subcommand registered: {name}")
            if not callable(spec.invoke):
                raise RegistryError(f"Subcommand '{name}' has no callable handler")
            table[name] = spec
        self._specs: Mapping[str, SubcommandSpec] = MappingProxyType(table)

    def __getitem__(self, name: str) -> SubcommandSpec:
        return self._specs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"SubcommandRegistry({list(self._specs)!r})"

    def get_spec(self, name: str) -> Optional[SubcommandSpec]:
        """Fetch a subcommand by name or return None."""
        return self._specs.get(name)
