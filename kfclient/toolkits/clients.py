"""
Typed access to one kind of resources as the platform's domain objects.

A resource client is a thin layer on top of an object store. It adds:

* the pre-write mutations (e.g. tagging the objects as managed by the platform);
* the membership validation of the fetched objects (e.g. to reject the objects
  of the same kind but not created by the platform, which have the same name);
* the post-read filtering with the callers' predicates;
* the read-modify-write and create-or-update operations.

There is no state kept between the calls, no caching, no locking, no retries.
The consistency is guaranteed only by the optimistic concurrency of the store
(resource versions). The read-modify-write operations (`transform`, `upsert`)
are not atomic: if another writer intervenes, the conflicts are escalated
as `ConflictError` for the callers to decide on retrying.

.. seealso::
    :func:`kfclient.utilities.retrying.retried` for the caller-level retries.
"""
import asyncio
import contextlib
import copy
import logging
from typing import Any, Iterable, Iterator, List, Optional, cast

import aiohttp

from kfclient.clients import errors
from kfclient.engines import loggers
from kfclient.storage import stores
from kfclient.structs import bodies, filters, options, references
from kfclient.toolkits import errors as client_errors


def _always(body: Any) -> bool:
    return True


class ResourceClient:
    """
    A client for one kind of resources, namespace-scoped.

    The membership validator and the pre-write mutators are fixed at creation.
    The membership validator is applied to all objects fetched from the store;
    the mutators are applied to all objects before they are sent to the store.
    """

    def __init__(
            self,
            *,
            store: stores.ObjectStore,
            kind: str,
            membership_validator: Optional[filters.Predicate] = None,
            upsert_mutators: Iterable[filters.Mutator] = (),
            logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__()
        self.store = store
        self.kind = kind
        self.membership_validator = membership_validator or _always
        self.upsert_mutators = filters.MutatorList(upsert_mutators)
        self.logger = logger if logger is not None else loggers.logger

    def _preprocess_upsert(
            self,
            operation: str,
            body: bodies.RawBody,
    ) -> bodies.RawBody:
        # The callers' objects remain intact; the partially mutated copies are dropped on errors.
        body = copy.deepcopy(body)
        try:
            self.upsert_mutators.apply(body)
        except Exception as e:
            name = bodies.get_name(body)
            raise client_errors.ValidationError(
                f"The {self.kind} {name!r} is rejected before {operation}: {e}",
                operation=operation, name=name) from e
        return body

    @contextlib.contextmanager
    def _translated_errors(self, operation: str, name: Optional[str]) -> Iterator[None]:
        what = f"the {self.kind} with the name {name!r}" if name else f"{self.kind}s"
        try:
            yield
        except errors.APINotFoundError as e:
            raise client_errors.NotFoundError(
                f"couldn't {operation} {what}: {e.message or e.status}",
                operation=operation, name=name) from e
        except errors.APIConflictError as e:
            raise client_errors.ConflictError(
                f"couldn't {operation} {what}: {e.message or e.status}",
                operation=operation, name=name) from e
        except errors.APIError as e:
            raise client_errors.StoreError(
                f"couldn't {operation} {what}: {e.message or e.status}",
                operation=operation, name=name) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise client_errors.StoreError(
                f"couldn't {operation} {what}: {e!r}",
                operation=operation, name=name) from e

    async def create(
            self,
            namespace: references.Namespace,
            body: bodies.RawBody,
            *opts: options.CreateOption,
    ) -> bodies.RawBody:
        """
        Insert the object into the store.

        The object is preprocessed with the mutators before being sent.
        """
        cfg = options.CreateConfig.defaults().extend(*opts)
        body = self._preprocess_upsert('create', body)
        if namespace is not None:
            bodies.ensure_meta(body).setdefault('namespace', namespace)

        name = bodies.get_name(body)
        loggers.ObjectLogger(body=body, base=self.logger).debug(f"Creating the {self.kind}.")
        with self._translated_errors('create', name):
            return await self.store.create(namespace=namespace, body=body, params=cfg.to_params())

    async def update(
            self,
            namespace: references.Namespace,
            body: bodies.RawBody,
            *opts: options.UpdateOption,
    ) -> bodies.RawBody:
        """
        Replace the existing object in the store with the new one.

        The object is preprocessed with the mutators before being sent.
        The concurrency token (``metadata.resourceVersion``) is sent as is:
        it is the caller's responsibility to have a recent one.
        """
        cfg = options.UpdateConfig.defaults().extend(*opts)
        body = self._preprocess_upsert('update', body)
        name = bodies.get_name(body)
        if not name:
            raise client_errors.ValidationError(
                f"The {self.kind} cannot be updated without a name.",
                operation='update', name=None)

        loggers.ObjectLogger(body=body, base=self.logger).debug(f"Updating the {self.kind}.")
        with self._translated_errors('update', name):
            return await self.store.replace(namespace=namespace, name=name, body=body,
                                            params=cfg.to_params())

    async def transform(
            self,
            namespace: references.Namespace,
            name: str,
            mutator: filters.Mutator,
    ) -> None:
        """
        Read, modify, and write back the object with the given name.

        The object can be modified by another writer between the read & write.
        In that case, the write fails with `ConflictError` and is not retried.
        """
        body = await self.get(namespace, name)
        try:
            mutator(body)
        except Exception as e:
            raise client_errors.ValidationError(
                f"The {self.kind} {name!r} cannot be transformed: {e}",
                operation='transform', name=name) from e
        await self.update(namespace, body)

    async def get(
            self,
            namespace: references.Namespace,
            name: str,
            *opts: options.GetOption,
    ) -> bodies.RawBody:
        """
        Retrieve the existing object with the given name.

        If the object exists but does not pass the membership validation,
        it is not returned, and `NotAMemberError` is raised instead.
        """
        cfg = options.GetConfig.defaults().extend(*opts)
        with self._translated_errors('get', name):
            body = await self.store.read(namespace=namespace, name=name, params=cfg.to_params())

        if not self.membership_validator(body):
            raise client_errors.NotAMemberError(
                f"an object with the name {name} exists, but it doesn't appear to be a {self.kind}",
                operation='get', name=name)
        return body

    async def delete(
            self,
            namespace: references.Namespace,
            name: str,
            *opts: options.DeleteOption,
    ) -> None:
        """
        Delete the existing object with the given name.

        The object is NOT checked for membership before the deletion:
        the exact name must be known to delete it.
        """
        cfg = options.DeleteConfig.defaults().extend(*opts)
        ref = {'metadata': {'name': name, 'namespace': namespace}}
        loggers.ObjectLogger(body=ref, base=self.logger).debug(f"Deleting the {self.kind}.")
        with self._translated_errors('delete', name):
            await self.store.delete(namespace=namespace, name=name,
                                    options=cfg.to_delete_options())

    async def list(
            self,
            namespace: references.Namespace,
            *opts: options.ListOption,
    ) -> List[bodies.RawBody]:
        """
        List the objects and filter them by membership and by the predicates.

        The selectors are passed to the store, but the store can ignore them.
        The objects not passing the membership validation are silently dropped.
        """
        cfg = options.ListConfig.defaults().extend(*opts)
        with self._translated_errors('list', None):
            items = await self.store.list(namespace=namespace, params=cfg.to_params())

        members = filters.filter_items(items, self.membership_validator)
        return filters.filter_items(members, filters.all_predicate(*cfg.filters))

    async def upsert(
            self,
            namespace: references.Namespace,
            new_body: bodies.RawBody,
            merge: filters.Merger,
    ) -> bodies.RawBody:
        """
        Insert the object if it does not exist, or merge & update the existing one.

        This is not atomic: the object can be created or deleted by another
        writer between the listing and the writing. In that case, the creation
        or the update fails with a `ConflictError` or a `NotFoundError`.
        """
        name = bodies.get_name(new_body)

        # NB: the field selector may be ignored by some stores, so we double check down below.
        existing = await self.list(namespace, options.with_list_field_selector({
            'metadata.name': name or '',
        }))

        for old_body in existing:
            if bodies.get_name(old_body) == name:
                try:
                    merged = cast(bodies.RawBody, merge(new_body, old_body))
                except Exception as e:
                    raise client_errors.ValidationError(
                        f"The {self.kind} {name!r} cannot be merged with the existing one: {e}",
                        operation='upsert', name=name) from e
                return await self.update(namespace, merged)

        return await self.create(namespace, new_body)
