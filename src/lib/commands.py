"""
Template command rendering

Each TemplateCommand kind renders to a function the runtime calls while
binding, which in turn binds a nested template:

    REFERENCE    JsonML.BST(Name).dataBind(data, index, count)
    INLINE       JsonML.BST([...inner template...]).dataBind(data, index, count)
    WRAPPER      JsonML.BST(Name).dataBind(data, index, count, {$ : [...], $slot : [...]})
    PLACEHOLDER  binds the caller's slot content passed in this.args
"""

from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from ..models.blocks import (
    COUNT_DEFAULT,
    DATA_DEFAULT,
    INDEX_DEFAULT,
    SLOT_ANONYMOUS,
    CommandKind,
    TemplateCommand,
)
from ..models.state import CompilationState
from .ecmascript import string_quote
from .jsonml import jsonml_build

if TYPE_CHECKING:
    from .formatter import EcmaScriptFormatter

BIND_FORMAT = (
    "function() {{\n"
    "\treturn JsonML.BST({template}).dataBind({data}, {index}, {count});\n"
    "}}"
)

WRAPPER_FORMAT = (
    "function() {{\n"
    "\treturn JsonML.BST({template}).dataBind({data}, {index}, {count}, {slots});\n"
    "}}"
)

PLACEHOLDER_FORMAT = (
    "function() {{\n"
    "\tvar inline = {slot},\n"
    "\t\tparts = this.args;\n"
    "\n"
    "\tif (parts && parts[inline]) {{\n"
    "\t\treturn JsonML.BST(parts[inline]).dataBind({data}, {index}, {count}, parts);\n"
    "\t}}\n"
    "}}"
)


def slotKey_make(name: Any) -> str:
    """
    Key of a named slot in the wrapper's slot object.

    Example:
        >>> slotKey_make(None)
        '$'
        >>> slotKey_make('footer')
        '$footer'
    """
    if not isinstance(name, str) or not name.strip():
        return SLOT_ANONYMOUS
    return SLOT_ANONYMOUS + name.strip()


def fragment_merge(values: List[Any]) -> Any:
    """
    Join JsonML values into one, flattening document fragments.

    Example:
        >>> fragment_merge([["", ["p", "a"], "b"], ["i", "c"]])
        ['', ['p', 'a'], 'b', ['i', 'c']]
    """
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    children: List[Any] = []
    for value in values:
        if isinstance(value, list) and value and value[0] == "":
            children.extend(value[1:])
        else:
            children.append(value)
    return [""] + children


class CommandRenderer:
    """Renders template commands, using the formatter for nested literals"""

    def __init__(self, formatter: "EcmaScriptFormatter") -> None:
        self.formatter = formatter
        self.renderers: Dict[CommandKind, Callable[[TemplateCommand], str]] = {
            CommandKind.REFERENCE: self.reference_render,
            CommandKind.INLINE: self.inline_render,
            CommandKind.WRAPPER: self.wrapper_render,
            CommandKind.PLACEHOLDER: self.placeholder_render,
        }

    def command_render(self, command: TemplateCommand) -> str:
        return self.renderers[command.kind](command)

    def args_render(self, command: TemplateCommand) -> Dict[str, str]:
        """data/index/count expressions with their defaults"""
        blocks = self.formatter.blocks
        return {
            "data": blocks.argument_render(command.data_expr, DATA_DEFAULT),
            "index": blocks.argument_render(command.index_expr, INDEX_DEFAULT),
            "count": blocks.argument_render(command.count_expr, COUNT_DEFAULT),
        }

    def reference_render(self, command: TemplateCommand) -> str:
        template = self.formatter.blocks.argument_render(command.name_expr, "null")
        return BIND_FORMAT.format(template=template, **self.args_render(command))

    def inline_render(self, command: TemplateCommand) -> str:
        content = command.inner.content if command.inner is not None else None
        template = self.formatter.markup_format(content)
        return BIND_FORMAT.format(template=template, **self.args_render(command))

    def wrapper_render(self, command: TemplateCommand) -> str:
        template = self.formatter.blocks.argument_render(command.name_expr, "null")
        slots = self.formatter.value_format(self.slots_build(command.inner), 0)
        return WRAPPER_FORMAT.format(template=template, slots=slots, **self.args_render(command))

    def placeholder_render(self, command: TemplateCommand) -> str:
        slot = string_quote(slotKey_make(command.name_expr))
        return PLACEHOLDER_FORMAT.format(slot=slot, **self.args_render(command))

    @staticmethod
    def slots_build(inner: Optional[CompilationState]) -> Dict[str, Any]:
        """Anonymous content under '$', then each named slot under '$name'"""
        slots: Dict[str, Any] = {}
        if inner is None:
            return slots
        anonymous = [jsonml_build(inner.content), jsonml_build(inner.named_templates.get(""))]
        anonymous = fragment_merge([value for value in anonymous if value is not None])
        if anonymous is not None:
            slots[SLOT_ANONYMOUS] = anonymous
        for name, tokens in inner.named_templates.items():
            if name:
                slots[slotKey_make(name)] = jsonml_build(tokens)
        return slots
