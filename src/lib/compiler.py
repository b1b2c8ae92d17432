"""
Compiler for JBST templates

Transforms template markup into a JavaScript program that builds the
template's JsonML+BST tree at load time.

Pipeline per source file:
    text → MarkupTokenizer → template_build (directives, code blocks,
    nested templates, declarations) → whitespace normalization →
    EcmaScriptFormatter → TemplateEmitter
"""

from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional

from ..config import appsettings
from ..models.blocks import (
    COMMAND_ARGS,
    COMMAND_CONTROL,
    COMMAND_INLINE,
    COMMAND_PLACEHOLDER,
    COMMAND_PREFIX,
    CodeBlock,
    CodeBlockKind,
    CommandKind,
    TemplateCommand,
)
from ..models.state import CompilationState
from ..models.tokens import DataName, MarkupTokenType, Token, TokenStream, UnparsedBlock
from .codeblocks import CodeBlockFormatter, delimiter_classify
from .directives import DirectiveProcessor
from .emitter import TemplateEmitter
from .errors import TokenError
from .extensions import ExtensionRegistry
from .formatter import EcmaScriptFormatter
from .jsonml import tokens_normalize, whitespace_is
from .log import LOG, WARN, template_context
from .tokenizer import MarkupTokenizer

SCRIPT_NAME = "script"
SCRIPT_SRC = "src"

ELEMENT_STARTS = (MarkupTokenType.ELEMENT_BEGIN, MarkupTokenType.ELEMENT_VOID)


class JbstCompiler:
    """
    Compiles JBST templates to client-side JavaScript

    Responsibilities:
    - Apply directives and collect declarations
    - Classify code blocks and nested template commands
    - Normalize whitespace and shape the template root
    - Emit the literal with its namespace and initialization boilerplate

    Example:
        >>> compiler = JbstCompiler()
        >>> print(compiler.compile('~/Hello.jbst', '<b><%= this.data %></b>'))
        /*global JsonML */
        var Hello = JsonML.BST([
        	"b",
        	function() {
        	return this.data;
        }
        ]);
    """

    def __init__(
        self,
        default_namespace: Optional[str] = None,
        registry: Optional[ExtensionRegistry] = None,
        app_settings: Optional[Mapping[str, Any]] = None,
        strict: Optional[bool] = None,
    ) -> None:
        """
        Initialize compiler

        Args:
            default_namespace: Namespace for file-derived names (default: JBST_DEFAULT_NAMESPACE)
            registry: Extension registry (default: built-in extensions)
            app_settings: Values for <%$ AppSettings: key %> when no registry is given
            strict: Raise on unknown jbst: commands (default: JBST_STRICT_MODE)
        """
        self.default_namespace = (
            default_namespace if default_namespace is not None else appsettings.default_namespace
        )
        self.registry = registry or ExtensionRegistry(app_settings=app_settings)
        self.strict = appsettings.strict_mode if strict is None else strict
        self.blocks = CodeBlockFormatter(self.registry)
        self.formatter = EcmaScriptFormatter(self.blocks)
        self.emitter = TemplateEmitter(self.formatter)
        self.directives = DirectiveProcessor()
        self.commands: Dict[str, Any] = {
            COMMAND_CONTROL: self.control_make,
            COMMAND_PLACEHOLDER: self.placeholder_make,
            COMMAND_INLINE: self.inline_make,
        }

    def compile(self, file_path: str, source: Any) -> str:
        """
        Compile a template to JavaScript

        Args:
            file_path: Template path (seeds the default name and resource keys)
            source: Template text, or a text stream with read()

        Returns:
            JavaScript program text

        Raises:
            TypeError: If source is None
            TokenError: On malformed directives or template commands
        """
        with template_context(file_path):
            state = self.template_process(file_path, source)
            return self.emitter.template_emit(state)

    def template_process(self, file_path: str, source: Any) -> CompilationState:
        """
        Parse and compose a template without emitting it

        Returns:
            Root CompilationState with processed content
        """
        if source is None:
            raise TypeError("source must be template text or a readable stream, not None")
        text = source if isinstance(source, str) else source.read()

        with template_context(file_path):
            LOG(f"Compiling template {file_path or '<anonymous>'}", level=2)
            tokens = MarkupTokenizer().tokens_get(text)
            state = CompilationState(file_path, self.default_namespace)
            self.template_build(state, TokenStream(tokens))
            self.references_check(state)
        return state

    def template_build(self, state: CompilationState, stream: TokenStream) -> CompilationState:
        """
        Process tokens into the state's content up to the end of input or
        an unmatched element end (the end of an enclosing command).

        Args:
            state: State receiving content, declarations and settings
            stream: Token stream positioned at the template body

        Returns:
            The same state, with content set (None if empty)
        """
        output: List[Token] = []
        root_count = 0
        depth = 0

        while not stream.completed:
            token = stream.peek()
            kind = token.token_type

            if kind in ELEMENT_STARTS:
                if token.name.prefix.lower() == COMMAND_PREFIX:
                    if self.command_process(state, stream, output) and depth == 0:
                        root_count += 1
                elif token.name.prefixed_name.lower() == SCRIPT_NAME:
                    if self.scriptBlock_process(state, stream, output) and depth == 0:
                        root_count += 1
                else:
                    if depth == 0:
                        root_count += 1
                    output.append(stream.pop())
                    self.attributes_process(state, stream, output)
                    if kind is MarkupTokenType.ELEMENT_BEGIN:
                        depth += 1
                continue

            if kind is MarkupTokenType.PRIMITIVE:
                stream.pop()
                processed = self.primitive_process(state, token)
                if processed is not None:
                    if depth == 0 and not whitespace_is(processed.value):
                        root_count += 1
                    output.append(processed)
                continue

            if kind is MarkupTokenType.ELEMENT_END:
                if depth == 0:
                    # balanced input: this closes the enclosing command
                    break
                depth -= 1

            output.append(stream.pop())

        output = tokens_normalize(output)
        if root_count > 1:
            self.templateRoot_wrap(output)
        else:
            self.templateRoot_trim(output)

        state.content = output or None
        return state

    def primitive_process(self, state: CompilationState, token: Token) -> Optional[Token]:
        """
        Interpret a primitive token.

        Code blocks become CodeBlock values (or vanish, for directives,
        declarations and server comments); unrecognized delimited blocks
        become their literal markup text.
        """
        if not isinstance(token.value, UnparsedBlock):
            return token
        block = delimiter_classify(token.value, state.file_path)
        if block is None:
            return replace(token, value=token.value.markup_get())
        return self.codeBlock_process(state, block, token)

    def codeBlock_process(self, state: CompilationState, block: CodeBlock, token: Token) -> Optional[Token]:
        if block.kind is CodeBlockKind.DIRECTIVE:
            self.directives.directive_process(state, block.raw_text, token)
            return None
        if block.kind is CodeBlockKind.DECLARATION:
            state.declarations.append(block.raw_text)
            return None
        if block.kind is CodeBlockKind.SERVER_COMMENT:
            return None
        return replace(token, value=block)

    def attributes_process(self, state: CompilationState, stream: TokenStream, output: List[Token]) -> None:
        """Copy an element's attributes, interpreting code block values"""
        while not stream.completed and stream.peek().token_type is MarkupTokenType.ATTRIBUTE:
            attr = stream.pop()
            value = stream.pop()
            if value is None or value.token_type is not MarkupTokenType.PRIMITIVE:
                raise TokenError(value or attr, f"Missing value for attribute {attr.name}")
            processed = self.primitive_process(state, value)
            if processed is None:
                LOG(f"Dropping attribute {attr.name}: its value produced no output", level=3)
                continue
            output.append(attr)
            output.append(processed)

    def command_process(self, state: CompilationState, stream: TokenStream, output: List[Token]) -> bool:
        """
        Process a 'jbst:' element and its body.

        Returns:
            True if a command was added to the output
        """
        token = stream.pop()
        command_name = token.name.local_name.lower()
        is_void = token.token_type is MarkupTokenType.ELEMENT_VOID
        args: Dict[str, Any] = dict.fromkeys(COMMAND_ARGS)

        while not stream.completed and stream.peek().token_type is MarkupTokenType.ATTRIBUTE:
            attr = stream.pop()
            if stream.completed:
                raise TokenError(attr, "Unexpected end of stream while processing JBST command")
            if attr.name.prefix and attr.name.prefix.lower() != COMMAND_PREFIX:
                raise TokenError(attr, f"Unsupported JBST command arg ({attr.name})")

            value = stream.pop()
            if value.token_type is not MarkupTokenType.PRIMITIVE:
                raise TokenError(value, f"Unexpected value for JBST command arg: {value.token_type.name}")

            arg_name = attr.name.local_name.lower()
            if arg_name not in args:
                raise TokenError(value, f"Unsupported JBST command arg ({attr.name})")

            processed = self.primitive_process(state, value)
            args[arg_name] = processed.value if processed is not None else None

        inner: Optional[CompilationState] = None
        if not is_void:
            inner = state.child_create()
            inner.slots_capture = command_name == COMMAND_CONTROL and args["name"] is not None
            self.template_build(inner, stream)

            end = stream.pop()
            if end is None:
                raise TokenError(token, "Unexpected end of stream while processing JBST command")
            if end.token_type is not MarkupTokenType.ELEMENT_END:
                raise TokenError(end, "Unexpected token while processing JBST command")

        factory = self.commands.get(command_name)
        if factory is None:
            if self.strict:
                raise TokenError(token, f"Unknown JBST command <{token.name}>")
            WARN(f"Unknown JBST command <{token.name}> dropped")
            return False

        command = factory(state, token, args, inner)
        if command is None:
            return False
        LOG(f"JBST command <{token.name}> compiled as {command.kind.name}", level=3)
        output.append(Token(MarkupTokenType.PRIMITIVE, value=command, line=token.line, column=token.column))
        return True

    def control_make(
        self, state: CompilationState, token: Token, args: Dict[str, Any], inner: Optional[CompilationState]
    ) -> TemplateCommand:
        """jbst:control → inline, reference or wrapper, decided by the name argument"""
        name = args["name"]
        binding = {"data_expr": args["data"], "index_expr": args["index"], "count_expr": args["count"]}

        if name is None:
            return TemplateCommand(CommandKind.INLINE, inner=inner, **binding)

        if isinstance(name, str):
            state.references.append(name.strip())

        if inner is None or (inner.content is None and not inner.named_templates):
            return TemplateCommand(CommandKind.REFERENCE, name_expr=name, **binding)

        return TemplateCommand(CommandKind.WRAPPER, name_expr=name, inner=inner, **binding)

    def placeholder_make(
        self, state: CompilationState, token: Token, args: Dict[str, Any], inner: Optional[CompilationState]
    ) -> Optional[TemplateCommand]:
        """
        jbst:placeholder → slot insertion point; inside a wrapper body a
        placeholder with content fills that slot instead (unnamed: slot '$').
        """
        name = args["name"]
        if state.slots_capture and inner is not None and inner.content is not None:
            if name is None or isinstance(name, str):
                state.namedTemplate_add((name or "").strip(), inner.content)
                return None
        if inner is not None and inner.content is not None:
            LOG(f"Ignoring content of placeholder at line {token.line}", level=2)

        return TemplateCommand(
            CommandKind.PLACEHOLDER,
            name_expr=name,
            data_expr=args["data"],
            index_expr=args["index"],
            count_expr=args["count"],
        )

    def inline_make(
        self, state: CompilationState, token: Token, args: Dict[str, Any], inner: Optional[CompilationState]
    ) -> None:
        """jbst:inline → named slot content of the enclosing wrapper"""
        name = args["name"]
        if not isinstance(name, str) or not name.strip():
            raise TokenError(token, f"<{token.name}> requires a name")
        if not state.slots_capture:
            WARN(f"<{token.name} name=\"{name}\"> outside a wrapper control has no effect")
        state.namedTemplate_add(name.strip(), inner.content if inner is not None else None)
        return None

    def scriptBlock_process(self, state: CompilationState, stream: TokenStream, output: List[Token]) -> bool:
        """
        Process a <script> element.

        Inline scripts are template declarations; scripts with a src
        attribute pass through as ordinary elements.

        Returns:
            True if the script was kept as an element
        """
        start = stream.pop()
        attributes: List[Token] = []
        external = False

        while not stream.completed and stream.peek().token_type is MarkupTokenType.ATTRIBUTE:
            attr = stream.pop()
            value = stream.pop()
            if not attr.name.prefix and attr.name.local_name.lower() == SCRIPT_SRC:
                external = True
            processed = self.primitive_process(state, value) if value is not None else None
            if processed is not None:
                attributes.extend([attr, processed])

        body: List[Token] = []
        if start.token_type is MarkupTokenType.ELEMENT_BEGIN:
            while not stream.completed:
                token = stream.pop()
                if token.token_type is MarkupTokenType.ELEMENT_END:
                    break
                if token.token_type is MarkupTokenType.PRIMITIVE:
                    body.append(token)

        if not external:
            state.declarations.append("".join(token.value_asString() for token in body))
            return False

        output.append(start)
        output.extend(attributes)
        if start.token_type is MarkupTokenType.ELEMENT_BEGIN:
            output.extend(body)
            output.append(Token(MarkupTokenType.ELEMENT_END))
        return True

    @staticmethod
    def templateRoot_wrap(output: List[Token]) -> None:
        """Wrap multiple roots in a document fragment (unnamed element)"""
        output.insert(0, Token(MarkupTokenType.ELEMENT_BEGIN, DataName("")))
        output.append(Token(MarkupTokenType.ELEMENT_END))

    @staticmethod
    def templateRoot_trim(output: List[Token]) -> None:
        """Drop whitespace text around a single root, trailing first"""
        while output and output[-1].token_type is MarkupTokenType.PRIMITIVE and whitespace_is(output[-1].value):
            output.pop()
        while output and output[0].token_type is MarkupTokenType.PRIMITIVE and whitespace_is(output[0].value):
            output.pop(0)

    @staticmethod
    def references_check(state: CompilationState) -> None:
        """Flag templates that reference themselves by name"""
        if not state.references:
            return
        if state.name in state.references:
            WARN(f"Template '{state.name}' references itself; recursion is left to the runtime")
