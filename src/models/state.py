"""
Program and compilation state models

Defines ProgramState for the functional CLI pipeline with the pipeline()
helper for composing its stages, and CompilationState, the per-template
state threaded through the compiler (name, imports, declarations,
named slot content).
"""

import re
from pathlib import Path
from argparse import Namespace
from typing import Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field

from .blocks import AutoMarkupType
from .tokens import Token


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    State bus of the CLI pipeline.

    Starts from the command line options; each stage fills in the fields
    it is responsible for.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, namespace, outputSubdir
        - env_check: sourceFiles, jsOutputdir, envOK
        - sources_compile: compileResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing .jbst sources
        outputdir: Base output directory for compiled scripts
        verbosity: Logging verbosity level (0-3)
        inputFile: Single .jbst file to compile (relative to inputdir), empty for all
        namespace: Default namespace for templates without an explicit name
        outputSubdir: Subdirectory within outputdir for output
        envOK: Environment validation passed
        sourceFiles: Resolved .jbst paths to compile
        jsOutputdir: Final output directory (outputdir + outputSubdir)
        compileResult: Compilation results (status, outputs, template_count)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    namespace: Optional[str] = field(default=None)
    outputSubdir: str = field(default=".")

    # Pipeline state
    envOK: bool = field(default=False)
    sourceFiles: List[Path] = field(default_factory=list)
    jsOutputdir: Path = field(default=Path("/"))
    compileResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (inputFile, namespace, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for compilation output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        # Only keep options that are ProgramState fields
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Thread a ProgramState through the given stages, left to right.

    A stage takes the previous state and returns a new one; stages copy
    rather than mutate their input.

    Example:
        final_state = pipeline(initial_state, env_check, sources_compile, results_report)

    This is equivalent to:
        results_report(sources_compile(env_check(initial_state)))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)


DECLARATION_FORMAT = (
    '// initialize template in the context of "this"\n'
    "(function() {{\n"
    "\t{content}\n"
    "}}).call({owner});"
)


@dataclass
class DeclarationBlock:
    """
    One-time initialization script of a template

    Declaration code blocks and inline <script> bodies are appended in
    document order, then rendered once as an IIFE invoked with the
    template as 'this'.
    """
    parts: List[str] = field(default_factory=list)

    def append(self, code: str) -> None:
        if code:
            self.parts.append(code)

    @property
    def content(self) -> str:
        return "".join(self.parts).strip()

    def is_empty(self) -> bool:
        return not self.content

    def render(self, owner: str = "this") -> str:
        """Render the IIFE, or '' when there is nothing to initialize"""
        if self.is_empty():
            return ""
        return DECLARATION_FORMAT.format(content=self.content, owner=owner or "this")


FILE_SEPARATORS = re.compile(r"[\\/]")
NAME_FALLBACK = "Template"


class CompilationState:
    """
    Per-template compilation state

    A root state is created per source file; every nested template body
    (inline, wrapper, named slot) gets a child state from child_create().
    Children share the root's imports and references by reference but
    own their declarations and slot content.

    The name is resolved lazily and memoized: once read it is frozen, since
    generated script and nested templates refer to it by identity.
    """

    def __init__(
        self,
        file_path: str = "",
        default_namespace: Optional[str] = None,
        parent: Optional["CompilationState"] = None,
    ) -> None:
        self.file_path: str = file_path or ""
        self.default_namespace: Optional[str] = default_namespace
        self.parent: Optional[CompilationState] = parent

        if parent is None:
            self.imports: List[str] = []
            self.references: List[str] = []
            self.auto_markup = AutoMarkupType.NONE
        else:
            self.imports = parent.imports
            self.references = parent.references
            self.auto_markup = parent.auto_markup

        self.declarations = DeclarationBlock()
        self.named_templates: Dict[str, Optional[List[Token]]] = {}
        self.content: Optional[List[Token]] = None
        self.children: List["CompilationState"] = []
        self.slots_capture: bool = False

        self._name: Optional[str] = None
        self._nameFrozen: bool = False

    def child_create(self) -> "CompilationState":
        """Create a state for a nested template body"""
        child = CompilationState(self.file_path, self.default_namespace, parent=self)
        self.children.append(child)
        return child

    @property
    def name(self) -> str:
        if not self._nameFrozen:
            if not self._name:
                self._name = self.name_derive()
            self._nameFrozen = True
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        if self._nameFrozen:
            raise ValueError(f"Template name is already fixed as '{self._name}'")
        from ..lib.ecmascript import identifier_ensure
        self._name = identifier_ensure(value) or None

    def name_derive(self) -> str:
        """
        Default name of this template.

        Root templates take the file base name (sanitized) under the default
        namespace; nested bodies answer to their parent's name, since their
        declarations run in the context of the enclosing template.

        Example:
            'A/B/C.jbst' with default_namespace 'NS' -> 'NS.C'
        """
        if self.parent is not None:
            return self.parent.name

        from ..lib.ecmascript import identifier_ensure
        base = FILE_SEPARATORS.split(self.file_path)[-1]
        stem, dot, _ = base.rpartition(".")
        base = identifier_ensure(stem if dot else base, nested=False) or NAME_FALLBACK
        namespace = identifier_ensure(self.default_namespace or "")
        return f"{namespace}.{base}" if namespace else base

    def import_add(self, namespace: str) -> None:
        namespace = (namespace or "").strip()
        if namespace and namespace not in self.imports:
            self.imports.append(namespace)

    def namedTemplate_add(self, name: str, content: Optional[List[Token]]) -> None:
        self.named_templates[name] = content

    def descendants_walk(self) -> List["CompilationState"]:
        """Every nested state below this one, in document order"""
        result: List[CompilationState] = []
        for child in self.children:
            result.append(child)
            result.extend(child.descendants_walk())
        return result
