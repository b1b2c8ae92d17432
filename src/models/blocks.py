"""
Code block and template command models

Code blocks are the delimited regions of a template ('<%= ... %>',
'<!-- ... -->', ...). Template commands are the 'jbst:' elements that
compose templates out of other templates. Both are closed tagged unions:
a kind enum plus an immutable payload, rendered by a single table-driven
renderer each (see lib/codeblocks.py and lib/commands.py).
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .extensions import ExtensionInvocation
    from .state import CompilationState


class CodeBlockKind(Enum):
    """
    Code block categories, selected solely by the opening delimiter
    """
    COMMENT = "comment"                # <!-- -->   inert literal + comment
    EXPRESSION = "expression"          # <%= %>     value of the expression
    STATEMENT = "statement"            # <% %>      runs on each bind
    UNPARSED = "unparsed"              # <%# %>     raw markup at bind time
    EXTENSION = "extension"            # <%$ %>     resolved by prefix
    DECLARATION = "declaration"        # <%! %>     one-time initialization
    DIRECTIVE = "directive"            # <%@ %>     compiler settings
    SERVER_COMMENT = "server_comment"  # <%-- --%>  discarded


@dataclass(frozen=True)
class CodeBlock:
    """
    Classified code block

    Attributes:
        kind: Block category
        raw_text: Interior text, verbatim and never parsed
        extension: Parsed prefix/value pair (EXTENSION blocks only)
    """
    kind: CodeBlockKind
    raw_text: str
    extension: Optional["ExtensionInvocation"] = None

    @property
    def code(self) -> str:
        return self.raw_text.strip()


class CommandKind(Enum):
    """Rendered shapes of a template command"""
    REFERENCE = "reference"      # <jbst:control name="X" />
    INLINE = "inline"            # <jbst:control> ... </jbst:control>
    WRAPPER = "wrapper"          # <jbst:control name="X"> ... </jbst:control>
    PLACEHOLDER = "placeholder"  # <jbst:placeholder name="slot" />


# Default bind arguments
DATA_DEFAULT = "this.data"
INDEX_DEFAULT = "this.index"
COUNT_DEFAULT = "this.count"


@dataclass(frozen=True)
class TemplateCommand:
    """
    Nested template invocation

    Argument expressions are plain strings (used as script text) or
    CodeBlock values; None selects the default this.data/this.index/this.count.

    Attributes:
        kind: Command shape
        name_expr: Template name expression (REFERENCE, WRAPPER) or slot name (PLACEHOLDER)
        data_expr: Data argument for dataBind
        index_expr: Index argument for dataBind
        count_expr: Count argument for dataBind
        inner: Child compilation state holding the body (INLINE, WRAPPER)
    """
    kind: CommandKind
    name_expr: Any = None
    data_expr: Any = None
    index_expr: Any = None
    count_expr: Any = None
    inner: Optional["CompilationState"] = field(default=None, compare=False)


class AutoMarkupType(Enum):
    """Implicit markup mode of a template"""
    NONE = "none"
    DATA = "data"
    AUTO = "auto"

    @classmethod
    def value_parse(cls, text: str) -> "AutoMarkupType":
        """
        Case-insensitive parse of an automarkup directive value.

        Raises:
            ValueError: If the text names no member
        """
        key = (text or "").strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f'"{text}" is an invalid value for AutoMarkupType')


# Template command element names (local names under the 'jbst' prefix)
COMMAND_PREFIX = "jbst"
COMMAND_CONTROL = "control"
COMMAND_PLACEHOLDER = "placeholder"
COMMAND_INLINE = "inline"

# Permitted command arguments
COMMAND_ARGS: List[str] = ["name", "data", "index", "count"]

# Slot key of anonymous wrapper content
SLOT_ANONYMOUS = "$"

