"""
Object-to-object mapping - declarative projection rules and the mapper.

Rules are declared per (source, destination) pair and validated when the
configuration is built; a configuration never changes afterwards and the
mapper it creates keeps no per-call state::

    class ForumProfile(MapperProfile):
        def configure(self):
            self.create_map(Post, PostDto) \\
                .for_member("author_name", "author.display_name") \\
                .ignore("excerpt")

    config = MapperConfiguration(profiles=[ForumProfile])
    mapper = config.create_mapper()
    dto = mapper.map(post, PostDto)
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import fields as dataclass_fields, is_dataclass
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)

from ..faults import MappingConfigFault, UnmappedTypeFault
from ..schema import AdminModel

logger = logging.getLogger("adminkit.mapping")

D = TypeVar("D")


# ── Member discovery ─────────────────────────────────────────────────────

def members_of(tp: type) -> List[str]:
    """
    Public members of a type, in declaration order.

    Admin models expose their schema fields, dataclasses their fields,
    anything else its class annotations.
    """
    if isinstance(tp, type) and issubclass(tp, AdminModel):
        return tp.schema().names()
    if is_dataclass(tp):
        return [f.name for f in dataclass_fields(tp)]

    names: List[str] = []
    for klass in reversed(tp.__mro__):
        for name in inspect.get_annotations(klass):
            if not name.startswith("_") and name not in names:
                names.append(name)
    return names


def read_member(obj: Any, path: str) -> Any:
    """Read a (dotted) member from an object or mapping; ``None`` if absent."""
    current = obj
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


# ── Rules ────────────────────────────────────────────────────────────────

class _Rule:
    __slots__ = ("source_member", "resolve", "constant", "ignored")

    def __init__(
        self,
        *,
        source_member: Optional[str] = None,
        resolve: Optional[Callable[[Any], Any]] = None,
        constant: Any = None,
        ignored: bool = False,
    ):
        self.source_member = source_member
        self.resolve = resolve
        self.constant = constant
        self.ignored = ignored

    def value(self, source: Any) -> Any:
        if self.resolve is not None:
            return self.resolve(source)
        if self.source_member is not None:
            return read_member(source, self.source_member)
        return self.constant


class TypeMap:
    """
    Projection rules from ``source`` to ``destination``.

    Members with the same name on both sides map implicitly; ``for_member``,
    ``ignore`` and ``constant`` override that per destination member.
    """

    def __init__(self, source: type, destination: type):
        self.source = source
        self.destination = destination
        self._rules: Dict[str, _Rule] = {}
        self._plan: Optional[Tuple[Tuple[str, _Rule], ...]] = None

    @property
    def pair(self) -> Tuple[type, type]:
        return (self.source, self.destination)

    def for_member(
        self,
        dest: str,
        source_member: Optional[str] = None,
        *,
        resolve: Optional[Callable[[Any], Any]] = None,
    ) -> "TypeMap":
        """Map ``dest`` from a (dotted) source member or a resolver function."""
        self._check_open()
        if (source_member is None) == (resolve is None):
            raise MappingConfigFault(
                f"{self}: for_member('{dest}') needs exactly one of source_member or resolve"
            )
        self._rules[dest] = _Rule(source_member=source_member, resolve=resolve)
        return self

    def ignore(self, *dest_members: str) -> "TypeMap":
        self._check_open()
        for dest in dest_members:
            self._rules[dest] = _Rule(ignored=True)
        return self

    def constant(self, dest: str, value: Any) -> "TypeMap":
        self._check_open()
        self._rules[dest] = _Rule(constant=value)
        return self

    def _check_open(self) -> None:
        if self._plan is not None:
            raise MappingConfigFault(f"{self}: configuration is sealed and cannot be changed")

    # ── Validation ───────────────────────────────────────────────────

    def validate(self) -> List[str]:
        """Problems with this map (empty when valid)."""
        errors: List[str] = []
        source_members = set(members_of(self.source))
        dest_members = members_of(self.destination)

        for dest, rule in self._rules.items():
            if dest not in dest_members:
                errors.append(f"{self}: unknown destination member '{dest}'")
            if rule.source_member is not None:
                head = rule.source_member.split(".", 1)[0]
                if head not in source_members:
                    errors.append(
                        f"{self}: unknown source member '{rule.source_member}' "
                        f"(mapped to '{dest}')"
                    )

        for dest in dest_members:
            if dest not in self._rules and dest not in source_members:
                errors.append(f"{self}: destination member '{dest}' is not mapped")

        return errors

    def seal(self) -> None:
        """Freeze the rules into an execution plan."""
        plan = []
        for dest in members_of(self.destination):
            rule = self._rules.get(dest) or _Rule(source_member=dest)
            if not rule.ignored:
                plan.append((dest, rule))
        self._plan = tuple(plan)

    # ── Execution ────────────────────────────────────────────────────

    def apply(self, source: Any) -> Any:
        values = {dest: rule.value(source) for dest, rule in self._plan}
        return _construct(self.destination, values)

    def __repr__(self) -> str:
        return f"{self.source.__name__} -> {self.destination.__name__}"


def _construct(destination: type, values: Dict[str, Any]) -> Any:
    if isinstance(destination, type) and issubclass(destination, AdminModel):
        return destination(**values)

    if is_dataclass(destination):
        init_names = {f.name for f in dataclass_fields(destination) if f.init}
        obj = destination(**{k: v for k, v in values.items() if k in init_names})
        for name, value in values.items():
            if name not in init_names:
                object.__setattr__(obj, name, value)
        return obj

    obj = destination()
    for name, value in values.items():
        setattr(obj, name, value)
    return obj


# ── Profiles ─────────────────────────────────────────────────────────────

class MapperProfile:
    """
    A group of type maps.

    Subclasses implement ``configure()`` and call ``create_map`` inside it.
    """

    def __init__(self):
        self._maps: List[TypeMap] = []
        self.configure()

    def configure(self) -> None:
        """Declare the type maps of this profile."""

    def create_map(self, source: type, destination: type) -> TypeMap:
        type_map = TypeMap(source, destination)
        self._maps.append(type_map)
        return type_map

    @property
    def type_maps(self) -> Tuple[TypeMap, ...]:
        return tuple(self._maps)


# ── Configuration ────────────────────────────────────────────────────────

class MapperConfiguration:
    """
    Validated, read-only collection of type maps.

    Raises ``MappingConfigFault`` on construction when any rule names an
    unknown member, a destination member is left unmapped, or a pair is
    registered twice.
    """

    def __init__(
        self,
        profiles: Iterable[MapperProfile | Type[MapperProfile]] = (),
        maps: Iterable[TypeMap] = (),
    ):
        collected: List[TypeMap] = []
        for profile in profiles:
            if isinstance(profile, type):
                profile = profile()
            collected.extend(profile.type_maps)
        collected.extend(maps)

        errors: List[str] = []
        by_pair: Dict[Tuple[type, type], TypeMap] = {}
        for type_map in collected:
            if type_map.pair in by_pair:
                errors.append(f"{type_map}: mapping registered more than once")
                continue
            by_pair[type_map.pair] = type_map
            errors.extend(type_map.validate())

        if errors:
            fault = MappingConfigFault("Mapper configuration is invalid", errors=errors)
            fault.log(logger)
            raise fault

        for type_map in by_pair.values():
            type_map.seal()
            logger.debug("Registered type map %s", type_map)

        self._maps: Mapping[Tuple[type, type], TypeMap] = MappingProxyType(by_pair)

    @property
    def type_maps(self) -> Mapping[Tuple[type, type], TypeMap]:
        return self._maps

    def find(self, source: type, destination: type) -> Optional[TypeMap]:
        """Map for ``source`` (or its nearest mapped base class) to ``destination``."""
        for klass in source.__mro__:
            type_map = self._maps.get((klass, destination))
            if type_map is not None:
                return type_map
        return None

    def create_mapper(self) -> "Mapper":
        return Mapper(self)

    def __len__(self) -> int:
        return len(self._maps)


class Mapper:
    """Stateless projector over a ``MapperConfiguration``; safe for concurrent use."""

    __slots__ = ("_configuration",)

    def __init__(self, configuration: MapperConfiguration):
        self._configuration = configuration

    @property
    def configuration(self) -> MapperConfiguration:
        return self._configuration

    def map(self, obj: Any, destination: Type[D]) -> D:
        type_map = self._configuration.find(type(obj), destination)
        if type_map is None:
            raise UnmappedTypeFault(type(obj), destination)
        return type_map.apply(obj)

    def map_many(self, objs: Iterable[Any], destination: Type[D]) -> List[D]:
        return [self.map(obj, destination) for obj in objs]


# ── Application configuration base ───────────────────────────────────────

class BaseMapperConfig(ABC):
    """
    Base for an application's mapping setup.

    ``register_mappings`` runs exactly once, from ``__init__``, and must
    call ``register_configuration``::

        class ForumMapperConfig(BaseMapperConfig):
            def register_mappings(self):
                self.register_configuration(MapperConfiguration(profiles=[ForumProfile]))
    """

    def __init__(self):
        self._configuration: Optional[MapperConfiguration] = None
        self.register_mappings()
        if self._configuration is None:
            raise MappingConfigFault(
                f"{type(self).__name__}.register_mappings() did not register a configuration"
            )

    @abstractmethod
    def register_mappings(self) -> None:
        """Build the configuration and pass it to ``register_configuration``."""

    def register_configuration(
        self,
        configuration: MapperConfiguration | Sequence[MapperProfile | Type[MapperProfile]],
    ) -> None:
        if self._configuration is not None:
            raise MappingConfigFault(f"{type(self).__name__}: configuration already registered")
        if not isinstance(configuration, MapperConfiguration):
            configuration = MapperConfiguration(profiles=configuration)
        self._configuration = configuration

    @property
    def configuration(self) -> MapperConfiguration:
        return self._configuration

    def create_mapper(self) -> Mapper:
        return self._configuration.create_mapper()
