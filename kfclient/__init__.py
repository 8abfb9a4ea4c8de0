"""
The main kfclient module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kfclient.clients.auth import (
    APIContext,
)
from kfclient.engines.loggers import (
    configure,
    LogFormat,
    ObjectLogger,
)
from kfclient.storage.stores import (
    ObjectStore,
    KubernetesStore,
    MemoryStore,
)
from kfclient.structs.bodies import (
    RawBody,
    Labels,
    Annotations,
    OwnerReference,
    build_object_reference,
    build_owner_reference,
)
from kfclient.structs.configuration import (
    ClientSettings,
)
from kfclient.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from kfclient.structs.filters import (
    Predicate,
    Mutator,
    Merger,
    MutatorList,
    all_predicate,
    filter_items,
    label_set_mutator,
    label_equals_predicate,
    labels_contains_predicate,
)
from kfclient.structs.options import (
    CreateConfig,
    UpdateConfig,
    GetConfig,
    ListConfig,
    DeleteConfig,
    with_create_dry_run,
    with_create_field_manager,
    with_update_dry_run,
    with_update_field_manager,
    with_get_resource_version,
    with_list_field_selector,
    with_list_label_selector,
    with_list_filters,
    with_delete_foreground_deletion,
    with_delete_delete_immediately,
)
from kfclient.structs.references import (
    Resource,
)
from kfclient.toolkits.builds import (
    make_build,
)
from kfclient.toolkits.clients import (
    ResourceClient,
)
from kfclient.toolkits.errors import (
    ClientError,
    ValidationError,
    NotFoundError,
    NotAMemberError,
    StoreError,
    ConflictError,
)
from kfclient.toolkits.routes import (
    ROUTES,
    is_route,
    make_routes_client,
    merge_routes,
)
from kfclient.utilities.piggybacking import (
    login,
    login_with_kubeconfig,
    login_with_service_account,
)
from kfclient.utilities.retrying import (
    retried,
)

__all__ = [
    'configure', 'LogFormat', 'ObjectLogger',
    'login', 'login_with_kubeconfig', 'login_with_service_account',
    'LoginError', 'ConnectionInfo', 'APIContext',
    'ObjectStore', 'KubernetesStore', 'MemoryStore',
    'RawBody', 'Labels', 'Annotations', 'OwnerReference',
    'build_object_reference', 'build_owner_reference',
    'ClientSettings',
    'Resource',
    'Predicate', 'Mutator', 'Merger', 'MutatorList',
    'all_predicate', 'filter_items',
    'label_set_mutator', 'label_equals_predicate', 'labels_contains_predicate',
    'CreateConfig', 'UpdateConfig', 'GetConfig', 'ListConfig', 'DeleteConfig',
    'with_create_dry_run', 'with_create_field_manager',
    'with_update_dry_run', 'with_update_field_manager',
    'with_get_resource_version',
    'with_list_field_selector', 'with_list_label_selector', 'with_list_filters',
    'with_delete_foreground_deletion', 'with_delete_delete_immediately',
    'ResourceClient',
    'ClientError', 'ValidationError', 'NotFoundError', 'NotAMemberError',
    'StoreError', 'ConflictError',
    'ROUTES', 'is_route', 'make_routes_client', 'merge_routes',
    'make_build',
    'retried',
]
