"""
CLI pipeline tests

Runs the pipeline stages (env_check → sources_compile → results_report)
over temporary template trees.
"""

from argparse import Namespace
from pathlib import Path

import pytest

from jbst.__main__ import env_check, results_report, sources_compile
from jbst.models import ProgramState, pipeline


def state_make(inputdir: Path, outputdir: Path, **overrides) -> ProgramState:
    options = Namespace(inputFile="", namespace=None, outputSubdir=".", verbosity=1)
    for key, value in overrides.items():
        setattr(options, key, value)
    return ProgramState.state_createFromNamespace(options=options, inputdir=inputdir, outputdir=outputdir)


@pytest.fixture
def sources(tmp_path):
    inputdir = tmp_path / "in"
    (inputdir / "views").mkdir(parents=True)
    (inputdir / "Hello.jbst").write_text("<b><%= this.data %></b>", encoding="utf-8")
    (inputdir / "views" / "List.jbst").write_text(
        "<ul><li><%$ Resources: item %></li></ul>", encoding="utf-8"
    )
    (inputdir / "notes.txt").write_text("not a template", encoding="utf-8")
    return inputdir


class TestPipeline:
    """Whole-tree compilation"""

    def test_compiles_tree(self, sources, tmp_path):
        outputdir = tmp_path / "out"
        state = state_make(sources, outputdir)

        final = pipeline(state, env_check, sources_compile, results_report)

        assert final.compileResult["status"] is True
        assert final.compileResult["template_count"] == 2
        hello = (outputdir / "Hello.js").read_text(encoding="utf-8")
        assert hello.startswith("/*global JsonML */\nvar Hello = JsonML.BST([")
        listing = (outputdir / "views" / "List.js").read_text(encoding="utf-8")
        assert 'JsonFx.Lang.get("/views/List.jbst,item")' in listing

    def test_namespace_and_subdir(self, sources, tmp_path):
        outputdir = tmp_path / "out"
        state = state_make(sources, outputdir, namespace="App", outputSubdir="js")

        pipeline(state, env_check, sources_compile)

        hello = (outputdir / "js" / "Hello.js").read_text(encoding="utf-8")
        assert "App.Hello = JsonML.BST(" in hello

    def test_single_input_file(self, sources, tmp_path):
        outputdir = tmp_path / "out"
        state = state_make(sources, outputdir, inputFile="views/List.jbst")

        final = pipeline(state, env_check, sources_compile)

        assert final.compileResult["template_count"] == 1
        assert (outputdir / "views" / "List.js").exists()
        assert not (outputdir / "Hello.js").exists()


class TestFailures:
    """Stages exit with status 1 on errors"""

    def test_missing_input_file(self, sources, tmp_path):
        state = state_make(sources, tmp_path / "out", inputFile="Nope.jbst")

        with pytest.raises(SystemExit) as excinfo:
            env_check(state)

        assert excinfo.value.code == 1

    def test_no_templates(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        state = state_make(empty, tmp_path / "out")

        with pytest.raises(SystemExit):
            env_check(state)

    def test_compile_error(self, sources, tmp_path, capsys):
        (sources / "Bad.jbst").write_text('<jbst:control name="X" foo="bar" />', encoding="utf-8")
        state = env_check(state_make(sources, tmp_path / "out"))

        with pytest.raises(SystemExit) as excinfo:
            sources_compile(state)

        assert excinfo.value.code == 1
        assert "Compile error in Bad.jbst" in capsys.readouterr().err

    def test_no_result(self, tmp_path):
        with pytest.raises(SystemExit):
            results_report(ProgramState(inputdir=tmp_path, outputdir=tmp_path))
