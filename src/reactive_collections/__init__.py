"""reactive_collections: list, set and dict that publish immutable snapshots to subscribers."""

from importlib.metadata import version as _version

__version__ = _version("reactive-collections")

from reactive_collections.stream import StateStream, DerivedStream, set_error_handler
from reactive_collections.notifier import MutationNotifier
from reactive_collections.observable import (
    ReactiveList,
    ReactiveSet,
    ReactiveDict,
    reactive_list_of,
    reactive_set_of,
    reactive_dict_of,
)
from reactive_collections.views import item_view, value_view, slice_view
# textual NOT auto-imported — opt-in only

__all__ = [
    "StateStream",
    "DerivedStream",
    "set_error_handler",
    "MutationNotifier",
    "ReactiveList",
    "ReactiveSet",
    "ReactiveDict",
    "reactive_list_of",
    "reactive_set_of",
    "reactive_dict_of",
    "item_view",
    "value_view",
    "slice_view",
]
