"""
Extension registry for '<%$ prefix: value %>' blocks

Maps case-insensitive prefixes to ExtensionSpec objects. Built in:

    <%$ AppSettings: key %>         compile-time configuration value
    <%$ Resources: key %>           runtime localized string lookup
    <%$ Resources: ClassKey, key %>

Unknown prefixes resolve to a pass-through extension that re-emits the
block's own text as a string literal.
"""

import re
from typing import Any, Dict, Mapping, Optional

from ..config import appsettings
from ..models.extensions import ExtensionInvocation, ExtensionSpec
from .ecmascript import scalar_format, string_quote
from .log import LOG

NULL = "null"

RESOURCE_FORMAT = "function() {{\n\treturn {lookup}({key});\n}}"

PATH_SEPARATORS = re.compile(r"[\\/]+")


def appRelative_make(path: str) -> str:
    """
    Normalize a template path to an app-relative, rooted form.

    Example:
        >>> appRelative_make('~/Views/Foo.jbst')
        '/Views/Foo.jbst'
        >>> appRelative_make('Views\\\\Foo.jbst')
        '/Views/Foo.jbst'
    """
    path = PATH_SEPARATORS.sub("/", path.strip()).lstrip("~")
    if not path.startswith("/"):
        path = "/" + path
    return path


def resourceKey_make(value: str, file_path: str) -> str:
    """
    Compose a resource lookup key.

    An explicit 'ClassKey, ResourceKey' pair is used as given; a bare key
    is scoped by the app-relative template path.

    Example:
        >>> resourceKey_make('greeting', '~/Foo.jbst')
        '/Foo.jbst,greeting'
        >>> resourceKey_make('Strings, greeting', '~/Foo.jbst')
        'Strings,greeting'
    """
    class_key, sep, resource_key = value.partition(",")
    if sep and class_key.strip():
        return f"{class_key.strip()},{resource_key.strip()}"
    resource_key = (resource_key if sep else class_key).strip()
    if not file_path:
        return resource_key
    return f"{appRelative_make(file_path)},{resource_key}"


class ExtensionRegistry:
    """
    Registry of extension specifications

    Args:
        app_settings: Values for the AppSettings extension; defaults to
            the configured JBST_APP_SETTINGS / JBST_APP_SETTINGS_FILE values
        resource_lookup: Runtime function called by the Resources extension
    """

    def __init__(
        self,
        app_settings: Optional[Mapping[str, Any]] = None,
        resource_lookup: Optional[str] = None,
    ) -> None:
        self.specs: Dict[str, ExtensionSpec] = {}
        self.app_settings: Mapping[str, Any] = (
            app_settings if app_settings is not None else appsettings.appSettings_load()
        )
        self.resource_lookup: str = resource_lookup or appsettings.resource_lookup
        self.default = ExtensionSpec(
            name="",
            description="Pass-through: emits the block text as a string literal",
            handler=passThrough_handler,
        )
        self.builtinExtensions_register()

    def register(self, spec: ExtensionSpec) -> None:
        """Register an extension specification (and its aliases)"""
        self.specs[spec.name.lower()] = spec
        for alias in spec.aliases:
            self.specs[alias.lower()] = spec

    def spec_get(self, prefix: str) -> ExtensionSpec:
        """Spec for a prefix, falling back to the pass-through extension"""
        return self.specs.get((prefix or "").strip().lower(), self.default)

    def extension_render(self, invocation: ExtensionInvocation) -> str:
        spec = self.spec_get(invocation.prefix)
        LOG(f"Extension '{invocation.prefix}' resolved to '{spec.name or 'pass-through'}'", level=3)
        return spec.handler(invocation, self)

    def builtinExtensions_register(self) -> None:
        """Register the AppSettings and Resources extensions"""
        self.register(ExtensionSpec(
            name="AppSettings",
            description="Inline a configuration value as a literal at compile time",
            handler=appSettings_handler,
            examples=["<%$ AppSettings: siteTitle %>"],
        ))
        self.register(ExtensionSpec(
            name="Resources",
            description="Look up a localized string at bind time",
            handler=resources_handler,
            examples=["<%$ Resources: greeting %>", "<%$ Resources: Strings, greeting %>"],
        ))


def appSettings_handler(invocation: ExtensionInvocation, registry: ExtensionRegistry) -> str:
    """Literal of the named setting; null if missing"""
    key = invocation.value
    if not key:
        return NULL
    if key not in registry.app_settings:
        LOG(f"AppSettings key '{key}' is not configured", level=2)
    return scalar_format(registry.app_settings.get(key))


def resources_handler(invocation: ExtensionInvocation, registry: ExtensionRegistry) -> str:
    """Runtime lookup of a localized string"""
    if not invocation.value:
        return NULL
    key = resourceKey_make(invocation.value, invocation.file_path)
    return RESOURCE_FORMAT.format(lookup=registry.resource_lookup, key=string_quote(key))


def passThrough_handler(invocation: ExtensionInvocation, registry: ExtensionRegistry) -> str:
    """Unknown prefix: keep the author's text as literal content"""
    return string_quote(invocation.raw_text.strip())
