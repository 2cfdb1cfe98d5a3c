from plugwire._internal.capabilities import CapabilityMember, MemberKind
from plugwire._internal.container import Container
from plugwire._internal.customizations import (
    CapabilityDescriptor,
    CustomizationRegistry,
    CustomizationSpec,
)
from plugwire._internal.customizer import Customizer
from plugwire._internal.interceptor import ResolutionInterceptor
from plugwire._internal.markers import Injected
from plugwire._internal.providers import Lifetime
from plugwire._internal.settings import PlugwireSettings
from plugwire._internal.synthesizer import SynthesizedTypeKey, TypeSynthesizer, synthesized_base
from plugwire.exceptions import (
    PlugwireCircularDependencyError,
    PlugwireDependencyInferenceError,
    PlugwireDependencyNotRegisteredError,
    PlugwireError,
    PlugwireInvalidRegistrationError,
    PlugwireNonExtensibleBaseError,
    PlugwireUnsupportedCapabilityError,
)

__all__ = [
    "CapabilityDescriptor",
    "CapabilityMember",
    "Container",
    "CustomizationRegistry",
    "CustomizationSpec",
    "Customizer",
    "Injected",
    "Lifetime",
    "MemberKind",
    "PlugwireCircularDependencyError",
    "PlugwireDependencyInferenceError",
    "PlugwireDependencyNotRegisteredError",
    "PlugwireError",
    "PlugwireInvalidRegistrationError",
    "PlugwireNonExtensibleBaseError",
    "PlugwireSettings",
    "PlugwireUnsupportedCapabilityError",
    "ResolutionInterceptor",
    "SynthesizedTypeKey",
    "TypeSynthesizer",
    "synthesized_base",
]
