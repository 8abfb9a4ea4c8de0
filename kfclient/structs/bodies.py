"""
All the structures coming from/to the Kubernetes API.

The objects are plain dicts as JSON-decoded from the API responses,
or as constructed by the callers before sending them to the API.
The type definitions below are for type-checking only: the objects can carry
arbitrary fields at runtime, which are not declared here.

The client never inspects the ``spec`` or ``status`` of the objects
on its own; only the injected predicates, mutators, and mergers do.
"""
from typing import Any, List, Mapping, MutableMapping, Optional, cast

from typing_extensions import TypedDict

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class OwnerReference(TypedDict, total=False):
    controller: bool
    blockOwnerDeletion: bool
    apiVersion: str
    kind: str
    name: str
    uid: str


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    ownerReferences: List[OwnerReference]
    resourceVersion: str
    generation: int
    creationTimestamp: str
    deletionTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


def get_name(body: Mapping[str, Any]) -> Optional[str]:
    return cast(Optional[str], (body.get('metadata') or {}).get('name'))


def get_namespace(body: Mapping[str, Any]) -> Optional[str]:
    return cast(Optional[str], (body.get('metadata') or {}).get('namespace'))


def get_labels(body: Mapping[str, Any]) -> Labels:
    return cast(Labels, (body.get('metadata') or {}).get('labels') or {})


def ensure_meta(body: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """ Get the object's metadata, creating it if absent or null. """
    if body.get('metadata') is None:
        body['metadata'] = {}
    return cast(MutableMapping[str, Any], body['metadata'])


def build_object_reference(
        body: Mapping[str, Any],
) -> Mapping[str, Any]:
    """
    Construct an object reference for the logs.

    Keep in mind that some fields can be absent: e.g. ``namespace``
    for cluster resources, or ``uid`` for the objects not yet stored.
    """
    ref = dict(
        apiVersion=body.get('apiVersion'),
        kind=body.get('kind'),
        name=(body.get('metadata') or {}).get('name'),
        uid=(body.get('metadata') or {}).get('uid'),
        namespace=(body.get('metadata') or {}).get('namespace'),
    )
    return {key: val for key, val in ref.items() if val}


def build_owner_reference(
        body: Mapping[str, Any],
) -> OwnerReference:
    """
    Construct an owner reference object for the parent-children relationships.

    The structure needed to link the children objects to the parent object,
    so that they are garbage-collected when the parent is deleted.
    See https://kubernetes.io/docs/concepts/workloads/controllers/garbage-collection/

    The parent must be already stored: the API rejects the references without
    the parent's ``uid``, so `ValueError` is raised for such parents.
    """
    meta = body.get('metadata') or {}
    if not meta.get('uid') or not meta.get('name'):
        raise ValueError(f"An owner must be stored and have a name & uid: {meta.get('name')!r}")
    ref = dict(
        controller=True,
        blockOwnerDeletion=True,
        apiVersion=body.get('apiVersion'),
        kind=body.get('kind'),
        name=meta['name'],
        uid=meta['uid'],
    )
    return cast(OwnerReference, {key: val for key, val in ref.items() if val})
