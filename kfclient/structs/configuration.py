"""
All configuration flags, options, settings to fine-tune the clients.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
"""
import dataclasses
from typing import Optional


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole API request, including the response reading.
    Measured in seconds. ``None`` means no timeout.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for the TCP connection establishing (both for new and pooled
    connections). ``None`` means no separate timeout (the whole request's one).
    """


@dataclasses.dataclass
class ManagementSettings:

    label: str = 'app.kubernetes.io/managed-by'
    """
    The label that marks the objects created & owned by the platform.
    The objects without it are not considered as the platform's ones,
    even if they are of the same resource kind.
    """

    value: str = 'kf'
    """
    The value of the managed-by label identifying the platform.
    """


@dataclasses.dataclass
class BuildingSettings:

    registry: str = 'gcr.io/kf-source'
    """
    The image registry & repository to push the built images to,
    unless the source specifies its own registry.
    """

    template_kind: str = 'ClusterBuildTemplate'
    """
    The kind of the build templates referenced by the builds.
    """

    buildpack_template: str = 'buildpack'
    """
    The template name for the builds from the source code with buildpacks.
    """

    container_template: str = 'container'
    """
    The template name for the builds from the pre-built container images.
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    management: ManagementSettings = dataclasses.field(default_factory=ManagementSettings)
    building: BuildingSettings = dataclasses.field(default_factory=BuildingSettings)
