#!/usr/bin/env python3
"""
jbst - JsonML+BST template compiler

Compiles JBST templates (markup with embedded <% %> code blocks and
jbst:control / jbst:placeholder composition elements) into client-side
JavaScript. Each template becomes a script that builds its JsonML tree
once and data-binds it on demand:

    Foo.MyList = JsonML.BST([ ... ]);
    Foo.MyList.dataBind(data);

The command line is a ChRIS plugin, so the same entry point runs locally
or inside a ChRIS compute environment.

Usage:
    jbst inputdir/ outputdir/

    Every *.jbst file under inputdir is compiled to a .js file at the
    same relative path under outputdir.

Examples:
    # Compile a whole tree of templates
    jbst views/ scripts/

    # Compile one template into a namespace
    jbst views/ scripts/ --inputFile MyList.jbst --namespace MyApp

    # Verbose output
    jbst views/ scripts/ -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings, ConfigError
from .lib import JbstCompiler, TokenError, __version__, LOG, state_connectToLogger
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
     _ _         _
    (_) |__  ___| |_
    | | '_ \/ __| __|
    | | |_) \__ \ |_
   _/ |_.__/|___/\__|
  |__/

  JsonML+BST template compiler
"""

# Define CLI arguments
parser = ArgumentParser(
    description="jbst - compile JBST templates to JsonML+BST JavaScript",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    default="",
    type=str,
    help="Single template to compile (relative to inputdir); all templates if omitted",
)

parser.add_argument(
    "--namespace",
    default=appsettings.default_namespace,
    type=str,
    help="Default namespace for templates without an explicit Name directive",
)

parser.add_argument(
    "--outputSubdir",
    default=".",
    type=str,
    help="Subdirectory within outputdir for the compiled scripts",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Collects the templates to compile and creates the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - sourceFiles: Template paths to compile
            - jsOutputdir: Created output directory path
            - envOK: True if environment is valid

    Exits:
        1 if the input file is missing or no templates were found
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputFile:
        input_file = state.inputdir / state.inputFile
        if not input_file.exists():
            print(f"Error: Input file not found: {input_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.sourceFiles = [input_file]
    else:
        pattern = f"*{appsettings.source_extension}"
        state.sourceFiles = sorted(state.inputdir.rglob(pattern))
        if not state.sourceFiles:
            print(f"Error: No {pattern} templates found in {state.inputdir}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)

    LOG(f"Templates to compile: {len(state.sourceFiles)}", level=2)

    state.jsOutputdir = state.outputdir / state.outputSubdir
    state.jsOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.jsOutputdir}", level=2)

    state.envOK = True
    return state


def sources_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile every template to a .js file.

    Template paths are passed to the compiler app-relative to inputdir
    ('~/views/List.jbst'), which seeds resource keys and default names.

    Args:
        inputstate: Program state with sourceFiles resolved

    Returns:
        ProgramState with added field:
            - compileResult: Dict containing:
                - status: bool (compilation success)
                - outputs: List[str] (paths of generated scripts)
                - template_count: int (number of templates compiled)

    Exits:
        1 on configuration, read or compile errors
    """

    state = inputstate.copy()

    LOG("Compiling templates...", level=1)

    try:
        compiler = JbstCompiler(default_namespace=state.namespace)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    outputs = []
    for source_file in state.sourceFiles:
        relative = source_file.relative_to(state.inputdir)
        virtual_path = "~/" + relative.as_posix()

        try:
            source = source_file.read_text(encoding="utf-8")
        except OSError as e:
            print(f"Error reading {source_file}: {e}", file=sys.stderr)
            sys.exit(1)

        try:
            script = compiler.compile(virtual_path, source)
        except TokenError as e:
            print(f"Compile error in {relative}: {e}", file=sys.stderr)
            if state.verbosity >= 3:
                import traceback

                traceback.print_exc()
            sys.exit(1)

        output_file = state.jsOutputdir / appsettings.outputName_make(relative)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(script, encoding="utf-8")
        outputs.append(str(output_file))
        LOG(f"Wrote {output_file}", level=2)

    state.compileResult = {
        "status": True,
        "outputs": outputs,
        "template_count": len(outputs),
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display compilation results to user.

    Args:
        inputstate: Program state with compileResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if compileResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.compileResult:
        print("Error: Compilation failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Compilation successful!", level=1)
    LOG(f"  Templates: {state.compileResult['template_count']}", level=1)
    for output in state.compileResult["outputs"]:
        LOG(f"  Output: {output}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="jbst - JsonML+BST template compiler",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - compile .jbst templates to JavaScript.

    Runs the pipeline stages in order:
        1. env_check: Validate paths and collect templates
        2. sources_compile: Compile each template to a .js file
        3. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
            - inputFile: str - Single template (empty for all)
            - namespace: Optional[str] - Default template namespace
            - outputSubdir: str - Output subdirectory name
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing .jbst templates
        outputdir: Directory where compiled scripts will be written

    Note:
        Called by the @chris_plugin wrapper once the command line has
        been parsed; inputdir and outputdir are positional arguments.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    state_connectToLogger(state)

    pipeline(state, env_check, sources_compile, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
