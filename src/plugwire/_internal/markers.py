from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class InjectedMarker:
    """A marker used to indicate a member should be populated by the container.

    ``Container.build_up`` scans class annotations for this marker and assigns
    each marked attribute the value resolved for its inner type.
    """


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a class attribute for the container's member-injection pass.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectedMarker()]``.

    Examples:
        .. code-block:: python

            class ReportService:
                clock: Injected[Clock]
    """

else:

    class Injected:
        """Mark a class attribute for the container's member-injection pass.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectedMarker()]``.
        Marked attributes are populated by ``Container.build_up``, which runs on
        every plain resolution and, for customized types, only when build-up is
        enabled.

        Examples:
            .. code-block:: python

                class ReportService:
                    clock: Injected[Clock]

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectedMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                inner = args[0]
                metadata = args[1:]
                return build_annotated_key((inner, *metadata, InjectedMarker()))
            return build_annotated_key((item, InjectedMarker()))


def is_injected_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., InjectedMarker()]."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    metadata = annotation_args[1:]
    return any(isinstance(item, InjectedMarker) for item in metadata)


def strip_injected_annotation(annotation: Any) -> Any:
    """Strip Injected marker while preserving other Annotated metadata."""
    if not is_injected_annotation(annotation):
        return annotation

    annotation_args = get_args(annotation)
    parameter_type = annotation_args[0]
    metadata = annotation_args[1:]
    filtered_metadata = tuple(item for item in metadata if not isinstance(item, InjectedMarker))
    if not filtered_metadata:
        return parameter_type
    return build_annotated_key((parameter_type, *filtered_metadata))


def build_annotated_key(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
