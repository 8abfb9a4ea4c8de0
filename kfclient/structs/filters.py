"""
Predicates & mutators over the raw bodies of the managed resources.

Predicates are pure boolean functions of one body. Mutators change the body
in place, and signal the failure by raising an exception: the body is then
left partially mutated by the mutators that have already succeeded,
so it must not be reused as if it were the pristine input.

Neither predicates nor mutators keep references to the bodies after the call.
"""
from typing import Any, Callable, Iterable, List, Mapping, MutableMapping, Optional

from kfclient.structs import bodies

Predicate = Callable[[Mapping[str, Any]], bool]
Mutator = Callable[[MutableMapping[str, Any]], None]

# Reconciles the new desired body with the existing stored one: (new, existing) -> merged.
Merger = Callable[[MutableMapping[str, Any], MutableMapping[str, Any]], MutableMapping[str, Any]]


def all_predicate(*predicates: Predicate) -> Predicate:
    """
    A predicate that passes if all of the children predicates pass.

    The children are checked left to right until the first failure.
    With no children, it always passes.
    """
    children = tuple(predicates)

    def check_all(body: Mapping[str, Any]) -> bool:
        return all(predicate(body) for predicate in children)

    return check_all


def filter_items(
        items: Iterable[MutableMapping[str, Any]],
        predicate: Predicate,
) -> List[MutableMapping[str, Any]]:
    return [item for item in items if predicate(item)]


class MutatorList(List[Mutator]):
    """
    A sequence of mutators applied as one.

    The mutators are applied in the list's order. The first failure is escalated
    as is, and the mutators after the failed one are not invoked.
    """

    def apply(self, body: MutableMapping[str, Any]) -> None:
        for mutator in self:
            mutator(body)


def label_set_mutator(labels: Mapping[str, str]) -> Mutator:
    """ A mutator that sets (adds or overwrites) the labels on the object. """
    labels = dict(labels)

    def set_labels(body: MutableMapping[str, Any]) -> None:
        meta = bodies.ensure_meta(body)
        if meta.get('labels') is None:
            meta['labels'] = {}
        meta['labels'].update(labels)

    return set_labels


def label_equals_predicate(key: str, value: str) -> Predicate:
    """ A predicate that the label exists on the object with exactly this value. """

    def check_label(body: Mapping[str, Any]) -> bool:
        labels = bodies.get_labels(body)
        return key in labels and labels[key] == value

    return check_label


def labels_contains_predicate(key: str) -> Predicate:
    """ A predicate that the label exists on the object with any value. """

    def check_label(body: Mapping[str, Any]) -> bool:
        return key in bodies.get_labels(body)

    return check_label


def format_selector(selector: Optional[Mapping[str, str]]) -> Optional[str]:
    """
    Render an equality-based selector for the K8s API: ``"key1=val1,key2=val2"``.

    The same syntax is used for both label selectors and field selectors.
    Keys are sorted to make the queries stable. ``None`` remains ``None``.
    """
    if selector is None:
        return None
    return ','.join(f'{key}={val}' for key, val in sorted(selector.items()))


def parse_selector(selector: Optional[str]) -> Mapping[str, str]:
    """ Parse an equality-based selector back into a mapping (only ``=`` & ``==``). """
    result = {}
    for part in (selector or '').split(','):
        part = part.strip()
        if not part:
            continue
        key, sep, val = part.partition('==') if '==' in part else part.partition('=')
        if not sep or key.endswith('!'):
            raise ValueError(f"Only equality-based selectors are supported: {part!r}")
        result[key.strip()] = val.strip()
    return result
