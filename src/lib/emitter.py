"""
Template emitter

Wraps a compiled template literal with its script boilerplate:

    /*global JsonML, Bar */

    /* namespace Foo */
    var Foo;
    if ("undefined" === typeof Foo) {
    	Foo = {};
    }

    Foo.MyList = JsonML.BST([ ... ]);
    // initialize template in the context of "this"
    (function() {
    	...
    }).call(Foo.MyList);
"""

from typing import List

from ..models.state import CompilationState
from .formatter import EcmaScriptFormatter
from .log import LOG

RUNTIME_GLOBAL = "JsonML"

NAMESPACE_ROOT_FORMAT = (
    "/* namespace {ns} */\n"
    "var {ns};\n"
    'if ("undefined" === typeof {ns}) {{\n'
    "\t{ns} = {{}};\n"
    "}}\n"
)

NAMESPACE_NESTED_FORMAT = (
    "/* namespace {ns} */\n"
    'if ("undefined" === typeof {ns}) {{\n'
    "\t{ns} = {{}};\n"
    "}}\n"
)


class TemplateEmitter:
    """
    Assembles the script for one compiled root template

    Args:
        formatter: Literal formatter for the template tree
    """

    def __init__(self, formatter: EcmaScriptFormatter) -> None:
        self.formatter = formatter

    def template_emit(self, state: CompilationState) -> str:
        """
        Render the complete script of a root template.

        Args:
            state: Processed root compilation state

        Returns:
            JavaScript program text
        """
        literal = self.formatter.markup_format(state.content)
        name = state.name
        LOG(f"Emitting template '{name}'", level=2)

        parts: List[str] = []
        globals_line = self.globals_emit(state, has_tree=state.content is not None)
        if globals_line:
            parts.append(globals_line)

        namespaces = self.namespaces_emit(name, preceded=bool(parts))
        if namespaces:
            parts.append(namespaces)
            parts.append(f"{name} = JsonML.BST({literal});\n")
        else:
            parts.append(f"var {name} = JsonML.BST({literal});\n")

        parts.append(self.declarations_emit(state))
        return "".join(parts)

    @staticmethod
    def globals_emit(state: CompilationState, has_tree: bool) -> str:
        """
        '/*global ... */' line listing external top-level identifiers.

        The runtime global is listed only for templates that produce a tree;
        imports contribute their first segment, de-duplicated in order.
        """
        names: List[str] = [RUNTIME_GLOBAL] if has_tree else []
        for namespace in state.imports:
            top = namespace.split(".")[0].strip()
            if top and top not in names:
                names.append(top)
        if not names:
            return ""
        return f"/*global {', '.join(names)} */\n"

    @staticmethod
    def namespaces_emit(name: str, preceded: bool) -> str:
        """
        Guarded namespace declarations for each parent segment of a dotted name.

        Returns '' for undotted names.
        """
        segments = name.split(".")[:-1]
        if not segments:
            return ""
        blocks: List[str] = []
        for depth in range(len(segments)):
            namespace = ".".join(segments[:depth + 1])
            template = NAMESPACE_ROOT_FORMAT if depth == 0 else NAMESPACE_NESTED_FORMAT
            if preceded or blocks:
                blocks.append("\n")
            blocks.append(template.format(ns=namespace))
        blocks.append("\n")
        return "".join(blocks)

    @staticmethod
    def declarations_emit(state: CompilationState) -> str:
        """
        Initialization IIFEs: the template's own, then those of nested bodies.

        Nested bodies have no global identity of their own, so their
        declarations run in the context of the root template.
        """
        owner = state.name
        rendered = [state.declarations.render(owner)]
        rendered.extend(child.declarations.render(owner) for child in state.descendants_walk())
        return "\n".join(code for code in rendered if code)
