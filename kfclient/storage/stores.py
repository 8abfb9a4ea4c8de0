"""
Object stores are the persistence collaborators of the resource clients.

The resource clients never talk to K8s API directly: they delegate all I/O
to a store, and only add the pre-write mutations, membership validation,
and post-read filtering on top of it. The store is responsible for
the actual persistence, for the conflict detection (via resource versions),
and for the consistency of the reads.

Two stores are provided:

* `KubernetesStore` talks to the K8s API over HTTP(S) for one resource kind.
* `MemoryStore` keeps the objects in memory, and mimics the K8s API behaviour
  closely enough for tests, dry runs, and local experiments.

Both raise the K8s API errors from :mod:`kfclient.clients.errors`:
`APINotFoundError` for absent objects and `APIConflictError` for duplicates
and concurrent modifications. Other errors are escalated as is.
"""
import abc
import copy
import datetime
import itertools
import logging
import uuid
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Tuple

from kfclient.clients import auth, creating, deleting, errors, fetching, replacing
from kfclient.structs import bodies, configuration, filters, references
from kfclient.utilities import typedefs


class ObjectStore(metaclass=abc.ABCMeta):
    """
    Base class and an interface for all object stores of one resource kind.

    All methods are namespace-scoped. The params are the query params
    as in K8s API: ``fieldSelector``, ``labelSelector``, ``dryRun``, etc.
    The stores are free to ignore the params they do not support.
    """

    @abc.abstractmethod
    async def create(
            self,
            *,
            namespace: references.Namespace,
            body: bodies.RawBody,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        raise NotImplementedError

    @abc.abstractmethod
    async def replace(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            body: bodies.RawBody,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        raise NotImplementedError

    @abc.abstractmethod
    async def read(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        raise NotImplementedError

    @abc.abstractmethod
    async def list(
            self,
            *,
            namespace: references.Namespace,
            params: Optional[Mapping[str, str]] = None,
    ) -> List[bodies.RawBody]:
        raise NotImplementedError

    @abc.abstractmethod
    async def delete(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        raise NotImplementedError


class KubernetesStore(ObjectStore):
    """
    A store of one resource kind in the K8s API.

    The API context is either passed explicitly, or taken from the current
    one at the time of each request (see `kfclient.clients.auth.context_var`).
    """

    def __init__(
            self,
            resource: references.Resource,
            *,
            settings: Optional[configuration.ClientSettings] = None,
            context: Optional[auth.APIContext] = None,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        super().__init__()
        self.resource = resource
        self.settings = settings if settings is not None else configuration.ClientSettings()
        self.context = context
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    async def create(
            self,
            *,
            namespace: references.Namespace,
            body: bodies.RawBody,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        body.setdefault('apiVersion', self.resource.api_version)
        if self.resource.kind is not None:
            body.setdefault('kind', self.resource.kind)
        return await creating.create_obj(
            resource=self.resource,
            namespace=namespace,
            body=body,
            params=params,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )

    async def replace(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            body: bodies.RawBody,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        body.setdefault('apiVersion', self.resource.api_version)
        if self.resource.kind is not None:
            body.setdefault('kind', self.resource.kind)
        return await replacing.replace_obj(
            resource=self.resource,
            namespace=namespace,
            name=name,
            body=body,
            params=params,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )

    async def read(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        return await fetching.read_obj(
            resource=self.resource,
            namespace=namespace,
            name=name,
            params=params,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )

    async def list(
            self,
            *,
            namespace: references.Namespace,
            params: Optional[Mapping[str, str]] = None,
    ) -> List[bodies.RawBody]:
        items, _ = await fetching.list_objs(
            resource=self.resource,
            namespace=namespace,
            params=params,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )
        return items

    async def delete(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        await deleting.delete_obj(
            resource=self.resource,
            namespace=namespace,
            name=name,
            options=options,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )


class MemoryStore(ObjectStore):
    """
    A store of one resource kind kept in memory.

    It mimics the K8s API behaviour for the aspects used by the clients:

    * ``uid``, ``resourceVersion``, ``creationTimestamp`` are assigned on writes.
    * Creating an existing object fails with HTTP 409 "AlreadyExists".
    * Replacing with a stale ``resourceVersion`` fails with HTTP 409 "Conflict".
      A replacement without ``resourceVersion`` is unconditional.
    * Absent objects fail with HTTP 404 "NotFound" on reading/replacing/deleting.
    * Equality-based label selectors are supported; field selectors are
      supported only for ``metadata.name`` & ``metadata.namespace`` --
      other fields are silently ignored, as some API servers do.
    * ``dryRun`` writes are validated but not persisted.

    The bodies are deep-copied both in and out, so that the callers never share
    the objects with the store or with each other.
    """

    def __init__(
            self,
            resource: Optional[references.Resource] = None,
            objects: Optional[List[bodies.RawBody]] = None,
    ) -> None:
        super().__init__()
        self.resource = resource
        self._objects: Dict[Tuple[Optional[str], str], bodies.RawBody] = {}
        self._versions = itertools.count(1)
        for body in objects or []:
            self._store(body)

    def __len__(self) -> int:
        return len(self._objects)

    def _store(self, body: bodies.RawBody) -> bodies.RawBody:
        stored = copy.deepcopy(body)
        meta = bodies.ensure_meta(stored)
        meta.setdefault('uid', str(uuid.uuid4()))
        meta.setdefault('creationTimestamp', _now())
        meta['resourceVersion'] = str(next(self._versions))
        if self.resource is not None:
            stored.setdefault('apiVersion', self.resource.api_version)
            if self.resource.kind is not None:
                stored.setdefault('kind', self.resource.kind)
        self._objects[(meta.get('namespace'), meta['name'])] = stored
        return copy.deepcopy(stored)

    def _get(self, namespace: references.Namespace, name: str) -> bodies.RawBody:
        try:
            return self._objects[(namespace, name)]
        except KeyError:
            raise errors.make_error(
                404, reason='NotFound', message=f'{self._kind} "{name}" not found',
                details={'name': name, 'kind': self._kind},
            ) from None

    @property
    def _kind(self) -> str:
        return self.resource.plural if self.resource is not None else 'objects'

    async def create(
            self,
            *,
            namespace: references.Namespace,
            body: bodies.RawBody,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        body = copy.deepcopy(body)
        meta = bodies.ensure_meta(body)
        if namespace is not None:
            meta.setdefault('namespace', namespace)
        name = meta.get('name')
        if not name:
            raise errors.make_error(
                422, reason='Invalid', message='metadata.name: Required value: name is required')
        if (meta.get('namespace'), name) in self._objects:
            raise errors.make_error(
                409, reason='AlreadyExists', message=f'{self._kind} "{name}" already exists',
                details={'name': name, 'kind': self._kind},
            )
        meta.pop('resourceVersion', None)
        meta.pop('uid', None)
        if _is_dry_run(params):
            return body
        return self._store(body)

    async def replace(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            body: bodies.RawBody,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        existing = self._get(namespace, name)
        body = copy.deepcopy(body)
        meta = bodies.ensure_meta(body)
        version = meta.get('resourceVersion')
        if version is not None and version != existing['metadata']['resourceVersion']:
            raise errors.make_error(
                409, reason='Conflict',
                message=f'Operation cannot be fulfilled on {self._kind} "{name}": '
                        f'the object has been modified; please apply your changes '
                        f'to the latest version and try again',
                details={'name': name, 'kind': self._kind},
            )

        # Server-managed fields are kept as they were, regardless of the new body.
        meta['name'] = name
        meta['namespace'] = existing['metadata'].get('namespace')
        meta['uid'] = existing['metadata']['uid']
        meta['creationTimestamp'] = existing['metadata']['creationTimestamp']
        if _is_dry_run(params):
            return body
        return self._store(body)

    async def read(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            params: Optional[Mapping[str, str]] = None,
    ) -> bodies.RawBody:
        return copy.deepcopy(self._get(namespace, name))

    async def list(
            self,
            *,
            namespace: references.Namespace,
            params: Optional[Mapping[str, str]] = None,
    ) -> List[bodies.RawBody]:
        params = params or {}
        labels = filters.parse_selector(params.get('labelSelector'))
        fields = filters.parse_selector(params.get('fieldSelector'))
        items: List[bodies.RawBody] = []
        for (obj_namespace, obj_name), body in sorted(self._objects.items(), key=_sort_key):
            if namespace is not None and obj_namespace != namespace:
                continue
            if 'metadata.name' in fields and fields['metadata.name'] != obj_name:
                continue
            if 'metadata.namespace' in fields and fields['metadata.namespace'] != obj_namespace:
                continue
            obj_labels = bodies.get_labels(body)
            if any(obj_labels.get(key) != val for key, val in labels.items()):
                continue
            items.append(copy.deepcopy(body))
        return items

    async def delete(
            self,
            *,
            namespace: references.Namespace,
            name: str,
            options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._get(namespace, name)
        del self._objects[(namespace, name)]


def _is_dry_run(params: Optional[Mapping[str, str]]) -> bool:
    return bool(params and params.get('dryRun') == 'All')


def _sort_key(item: Tuple[Tuple[Optional[str], str], MutableMapping[str, Any]]) -> Tuple[str, str]:
    (namespace, name), _ = item
    return (namespace or '', name)


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')
