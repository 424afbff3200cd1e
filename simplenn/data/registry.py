"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping, Tuple

from ..core.types import TrainingExample


@dataclass(frozen=True)
class DatasetSpec:
    """A fully materialised training set plus how it was produced.

    Attributes
    ----------
    name:
        Registry identifier of the dataset.
    examples:
        Every training example; training is always full-batch.
    d_in, d_out:
        Input and desired-output vector lengths shared by all examples.
    provenance:
        Options the factory was called with, recorded in run manifests so a
        run can be reproduced.
    """

    name: str
    examples: Tuple[TrainingExample, ...]
    d_in: int
    d_out: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.examples)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("two_clusters")
        def make_two_clusters(**kwargs):
            ...

    or directly::

        register_dataset("two_clusters", make_two_clusters)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Build the :class:`DatasetSpec` registered as ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if not spec.examples:
        raise ValueError(f"Dataset {spec.name!r} produced no examples")
    for idx, example in enumerate(spec.examples):
        if example.inputs.shape[0] != spec.d_in or example.targets.shape[0] != spec.d_out:
            raise ValueError(
                f"Dataset {spec.name!r} example {idx} has shape "
                f"({example.inputs.shape[0]}, {example.targets.shape[0]}), "
                f"expected ({spec.d_in}, {spec.d_out})"
            )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
