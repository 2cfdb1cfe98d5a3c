class PlugwireError(Exception):
    """Represent a base class for all plugwire-specific failures.

    Catch this type when you want to handle any plugwire error path without
    matching each concrete exception class individually.
    """


class PlugwireInvalidRegistrationError(PlugwireError):
    """Signal invalid registration configuration.

    Raised by registration APIs such as ``Container.add_instance``,
    ``Container.add_concrete`` and ``Container.add_factory`` when arguments
    are invalid.

    Typical fixes include passing a non-abstract class that actually subclasses
    the ``provides`` key, or a callable factory.
    """


class PlugwireDependencyNotRegisteredError(PlugwireError):
    """Signal that a dependency key has no provider.

    Raised by ``Container.resolve`` when autoregistration is disabled, or when
    the requested key is not a concrete class that can be autoregistered
    (protocols, abstract classes, builtins).

    Typical fixes include registering the dependency explicitly with
    ``add_concrete``/``add_instance``/``add_factory``.
    """


class PlugwireDependencyInferenceError(PlugwireError):
    """Signal that dependencies cannot be inferred from annotations.

    Common triggers are missing annotations on required constructor
    parameters, or ``Injected[...]`` class attributes whose annotations cannot
    be evaluated at runtime.
    """


class PlugwireCircularDependencyError(PlugwireError):
    """Signal that a dependency is requested while it is already being resolved.

    The message lists the resolution chain that closed the cycle.
    """


class PlugwireUnsupportedCapabilityError(PlugwireError):
    """Signal a capability that cannot be added to a resolved type.

    Raised at synthesis time, from the ``resolve`` call that needed the
    combined type, never when ``extend_with`` is called. Triggers are a
    capability that is not a class, a member that needs real logic (abstract
    or protocol methods) the base implementation does not provide, and two
    capabilities declaring the same member name.

    Typical fixes include implementing the method on the base implementation,
    turning the member into an annotated attribute or property, or removing
    one of the conflicting capabilities.
    """


class PlugwireNonExtensibleBaseError(PlugwireError):
    """Signal that the current base implementation cannot be subclassed.

    Raised at synthesis time when the type mapped to a customized dependency is
    not a class, is marked ``@final``, or cannot be combined with the declared
    capabilities (unsubclassable builtins, layout or metaclass conflicts).

    Typical fixes include remapping the dependency to an extensible
    implementation or dropping the capabilities for that type.
    """
