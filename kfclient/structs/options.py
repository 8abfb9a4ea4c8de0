"""
Per-operation configurations of the resource clients.

Every operation has its own frozen configuration record with the defaults,
and its own option constructors. An option is a pure function that returns
a copy of a configuration with one field overridden. The options are applied
in the order they are passed, so the later options win for the same field,
while the options for different fields are additive::

    config = ListConfig.defaults().extend(
        with_list_label_selector({'team': 'payments'}),
        with_list_filters(is_ready),
    )

The configurations are resolved once at the beginning of each operation
and are never modified afterwards.
"""
import dataclasses
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, TypeVar

from kfclient.structs import filters

# The field named "filters" shadows the module in the class bodies below.
Predicate = filters.Predicate

_ConfigT = TypeVar('_ConfigT', bound='_Config')


class _Config:

    @classmethod
    def defaults(cls: Type[_ConfigT]) -> _ConfigT:
        return cls()

    def extend(self: _ConfigT, *options: Callable[[_ConfigT], _ConfigT]) -> _ConfigT:
        config = self
        for option in options:
            config = option(config)
        return config


@dataclasses.dataclass(frozen=True)
class CreateConfig(_Config):

    dry_run: bool = False
    """
    Only validate the object on the server side, but do not persist it.
    """

    field_manager: Optional[str] = None
    """
    The name of the actor making the change, as recorded in the managed fields.
    """

    def to_params(self) -> Mapping[str, str]:
        return _write_params(dry_run=self.dry_run, field_manager=self.field_manager)


@dataclasses.dataclass(frozen=True)
class UpdateConfig(_Config):

    dry_run: bool = False
    """
    Only validate the object on the server side, but do not persist it.
    """

    field_manager: Optional[str] = None
    """
    The name of the actor making the change, as recorded in the managed fields.
    """

    def to_params(self) -> Mapping[str, str]:
        return _write_params(dry_run=self.dry_run, field_manager=self.field_manager)


@dataclasses.dataclass(frozen=True)
class GetConfig(_Config):

    resource_version: Optional[str] = None
    """
    The minimal resource version to serve; e.g. ``"0"`` to serve from a cache.
    """

    def to_params(self) -> Mapping[str, str]:
        params: Dict[str, str] = {}
        if self.resource_version is not None:
            params['resourceVersion'] = self.resource_version
        return params


@dataclasses.dataclass(frozen=True)
class ListConfig(_Config):

    field_selector: Optional[Mapping[str, str]] = None
    """
    The equality-based field selector to push down to the store.
    Some stores ignore some fields, so it is only a hint.
    """

    label_selector: Optional[Mapping[str, str]] = None
    """
    The equality-based label selector to push down to the store.
    """

    filters: Tuple[Predicate, ...] = ()
    """
    The predicates applied to the fetched objects after the membership check.
    All of them must pass for an object to be returned.
    """

    def to_params(self) -> Mapping[str, str]:
        params: Dict[str, str] = {}
        field_selector = filters.format_selector(self.field_selector)
        label_selector = filters.format_selector(self.label_selector)
        if field_selector is not None:
            params['fieldSelector'] = field_selector
        if label_selector is not None:
            params['labelSelector'] = label_selector
        return params


@dataclasses.dataclass(frozen=True)
class DeleteConfig(_Config):

    foreground_deletion: bool = False
    """
    Block the deletion until all the dependents are deleted.
    By default, the dependents are deleted in the background.
    """

    delete_immediately: bool = False
    """
    Delete without a grace period (i.e. with zero seconds).
    By default, the object's own grace period is used.
    """

    def to_delete_options(self) -> Mapping[str, Any]:
        options: Dict[str, Any] = {}
        if self.foreground_deletion:
            options['propagationPolicy'] = 'Foreground'
        if self.delete_immediately:
            options['gracePeriodSeconds'] = 0
        return options


CreateOption = Callable[[CreateConfig], CreateConfig]
UpdateOption = Callable[[UpdateConfig], UpdateConfig]
GetOption = Callable[[GetConfig], GetConfig]
ListOption = Callable[[ListConfig], ListConfig]
DeleteOption = Callable[[DeleteConfig], DeleteConfig]


def _write_params(*, dry_run: bool, field_manager: Optional[str]) -> Mapping[str, str]:
    params: Dict[str, str] = {}
    if dry_run:
        params['dryRun'] = 'All'
    if field_manager is not None:
        params['fieldManager'] = field_manager
    return params


def with_create_dry_run(dry_run: bool = True) -> CreateOption:
    return lambda config: dataclasses.replace(config, dry_run=dry_run)


def with_create_field_manager(field_manager: Optional[str]) -> CreateOption:
    return lambda config: dataclasses.replace(config, field_manager=field_manager)


def with_update_dry_run(dry_run: bool = True) -> UpdateOption:
    return lambda config: dataclasses.replace(config, dry_run=dry_run)


def with_update_field_manager(field_manager: Optional[str]) -> UpdateOption:
    return lambda config: dataclasses.replace(config, field_manager=field_manager)


def with_get_resource_version(resource_version: Optional[str]) -> GetOption:
    return lambda config: dataclasses.replace(config, resource_version=resource_version)


def with_list_field_selector(selector: Optional[Mapping[str, str]]) -> ListOption:
    selector = dict(selector) if selector is not None else None
    return lambda config: dataclasses.replace(config, field_selector=selector)


def with_list_label_selector(selector: Optional[Mapping[str, str]]) -> ListOption:
    selector = dict(selector) if selector is not None else None
    return lambda config: dataclasses.replace(config, label_selector=selector)


def with_list_filters(*predicates: filters.Predicate) -> ListOption:
    return lambda config: dataclasses.replace(config, filters=tuple(predicates))


def with_delete_foreground_deletion(foreground: bool = True) -> DeleteOption:
    return lambda config: dataclasses.replace(config, foreground_deletion=foreground)


def with_delete_delete_immediately(immediately: bool = True) -> DeleteOption:
    return lambda config: dataclasses.replace(config, delete_immediately=immediately)
