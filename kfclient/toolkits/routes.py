"""
The platform's routes, as backed by Istio's virtual services.

Only the virtual services marked with the managed-by label of the platform
are considered as routes. The others are invisible in the lists, and
cause `NotAMemberError` when accessed by name (though they still can be deleted).
"""
import copy
from typing import Any, MutableMapping, Optional

from kfclient.storage import stores
from kfclient.structs import bodies, configuration, filters, references
from kfclient.toolkits import clients

ROUTES = references.Resource(
    'networking.istio.io', 'v1alpha3', 'virtualservices',
    kind='VirtualService', namespaced=True,
)

KIND = 'Route'


def is_route(
        settings: Optional[configuration.ClientSettings] = None,
) -> filters.Predicate:
    """ A membership predicate: the object is marked as managed by the platform. """
    settings = settings if settings is not None else configuration.ClientSettings()
    return filters.label_equals_predicate(settings.management.label, settings.management.value)


def mark_as_route(
        settings: Optional[configuration.ClientSettings] = None,
) -> filters.Mutator:
    settings = settings if settings is not None else configuration.ClientSettings()
    return filters.label_set_mutator({settings.management.label: settings.management.value})


def make_routes_client(
        store: stores.ObjectStore,
        settings: Optional[configuration.ClientSettings] = None,
) -> clients.ResourceClient:
    return clients.ResourceClient(
        store=store,
        kind=KIND,
        membership_validator=is_route(settings),
        upsert_mutators=[mark_as_route(settings)],
    )


def merge_routes(
        new: MutableMapping[str, Any],
        existing: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """
    Merge the desired route into the existing one for the update.

    The existing metadata is kept as is (the resource version, uid, owners, etc),
    except that the labels & annotations of both are united (the new ones win).
    The spec is taken from the new route entirely.
    """
    merged = copy.deepcopy(existing)
    meta = bodies.ensure_meta(merged)
    new_meta = new.get('metadata') or {}
    for key in ['labels', 'annotations']:
        if meta.get(key) is not None or new_meta.get(key) is not None:
            meta[key] = dict(meta.get(key) or {}, **(new_meta.get(key) or {}))
    if 'spec' in new:
        merged['spec'] = copy.deepcopy(new['spec'])
    return merged
