"""
Builds of the applications' images from their sources.

A source (``kf.dev/v1alpha1``, kind ``Source``) declares where the code is
and how to build it: either with buildpacks from the uploaded source code
(``spec.buildpackBuild``), or from an already built container image
(``spec.containerImage``). The build (``build.knative.dev/v1alpha1``,
kind ``Build``) is derived from it and is owned by it, so that it is
garbage-collected together with the source.

The derivation is deterministic: the same source always produces the same
build, so it can be re-applied (e.g. upserted) without creating duplicates.
"""
from typing import Any, Dict, List, Mapping, Optional

from kfclient.structs import bodies, configuration, references

SOURCES = references.Resource('kf.dev', 'v1alpha1', 'sources', kind='Source')
BUILDS = references.Resource('build.knative.dev', 'v1alpha1', 'builds', kind='Build')

SOURCE_LABEL = 'kf-source'


def build_name(source: Mapping[str, Any]) -> str:
    name = bodies.get_name(source)
    if not name:
        raise ValueError("The source has no name.")
    return name


def app_image_name(namespace: Optional[str], name: str, tag: str) -> str:
    return f"app-{namespace}-{name}:{tag}" if namespace else f"app-{name}:{tag}"


def join_repository_image(repository: str, image_name: str) -> str:
    return f"{repository.rstrip('/')}/{image_name}"


def make_build(
        source: Mapping[str, Any],
        settings: Optional[configuration.ClientSettings] = None,
) -> bodies.RawBody:
    """
    Construct a build for the source.

    The image tag is the source's generation, so that every change
    of the source leads to a new image (but not to a new build object).

    Raises `ValueError` if the source specifies no known build mode,
    or if it is not stored yet (has no ``uid`` for the owner reference).
    """
    settings = settings if settings is not None else configuration.ClientSettings()
    name = build_name(source)
    namespace = bodies.get_namespace(source)
    spec: Mapping[str, Any] = source.get('spec') or {}

    generation = (source.get('metadata') or {}).get('generation')
    tag = str(generation) if generation else 'latest'

    template: Dict[str, Any]
    build_spec: Dict[str, Any] = {}
    if spec.get('buildpackBuild'):
        buildpack_build = spec['buildpackBuild']
        registry = buildpack_build.get('registry') or settings.building.registry
        image = join_repository_image(registry, app_image_name(namespace, name, tag))
        arguments: List[Dict[str, str]] = [
            {'name': 'IMAGE', 'value': image},
            {'name': 'BUILDPACK', 'value': buildpack_build.get('buildpack', '')},
        ]
        if buildpack_build.get('builderImage'):
            arguments.append({'name': 'BUILDER_IMAGE', 'value': buildpack_build['builderImage']})
        build_spec['source'] = {'custom': {'image': buildpack_build.get('source', '')}}
        template = {
            'name': settings.building.buildpack_template,
            'kind': settings.building.template_kind,
            'arguments': arguments,
        }
    elif spec.get('containerImage'):
        container_image = spec['containerImage']
        image = join_repository_image(settings.building.registry,
                                      app_image_name(namespace, name, tag))
        template = {
            'name': settings.building.container_template,
            'kind': settings.building.template_kind,
            'arguments': [
                {'name': 'SOURCE_IMAGE', 'value': container_image.get('image', '')},
                {'name': 'IMAGE', 'value': image},
            ],
        }
    else:
        raise ValueError(f"The source {name!r} has neither buildpackBuild nor containerImage.")

    build_spec['template'] = template
    if spec.get('serviceAccount'):
        build_spec['serviceAccountName'] = spec['serviceAccount']

    labels = dict(bodies.get_labels(source))
    labels.update({
        settings.management.label: settings.management.value,
        SOURCE_LABEL: name,
    })

    metadata: Dict[str, Any] = {
        'name': name,
        'labels': labels,
        'ownerReferences': [bodies.build_owner_reference(source)],
    }
    if namespace is not None:
        metadata['namespace'] = namespace

    return {
        'apiVersion': BUILDS.api_version,
        'kind': 'Build',
        'metadata': metadata,  # type: ignore
        'spec': build_spec,
    }
