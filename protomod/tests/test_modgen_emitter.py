"""Tests for writing emission plans to disk."""

import importlib
import sys

import pytest

from protomod.exceptions import OutputError
from protomod.modgen import FlatArtifact, PlanEmitter, modularize
from protomod.tests.fixtures import CRAB_ARTIFACTS


class TestPlanEmitter:
    """Tests for the PlanEmitter class."""

    def test_writes_all_files(self, tmp_path):
        emission = modularize(CRAB_ARTIFACTS)

        written = PlanEmitter(tmp_path).emit(emission)

        assert len(written) == len(emission)
        assert (tmp_path / '__init__.py').read_text() == 'from . import crabs\n'
        assert (tmp_path / 'crabs' / 'disney' / 'ariel.py').read_text() == (
            'class Sebastian:\n    pass\n'
        )
        assert (tmp_path / 'crabs' / 'disney' / '__init__.py').read_text() == (
            'from . import ariel\n'
        )

    def test_preserves_line_endings(self, tmp_path):
        content = 'a = 1\r\nb = 2\r\n'
        emission = modularize([FlatArtifact('pkg', content)])

        PlanEmitter(tmp_path).emit(emission)

        assert (tmp_path / 'pkg.py').read_bytes() == content.encode()

    def test_existing_file_fails_without_overwrite(self, tmp_path):
        (tmp_path / 'crabs.py').write_text('old')
        emission = modularize([FlatArtifact('crabs', 'new')])

        with pytest.raises(OutputError) as exc_info:
            PlanEmitter(tmp_path).emit(emission)

        assert 'crabs.py' in exc_info.value.output_path
        assert (tmp_path / 'crabs.py').read_text() == 'old'

    def test_existing_file_fails_before_writing_anything(self, tmp_path):
        """Test that an existing later file leaves no partial output behind."""
        (tmp_path / 'z.py').write_text('old')
        emission = modularize([FlatArtifact('a', 'A = 1\n'), FlatArtifact('z', '')])

        with pytest.raises(OutputError) as exc_info:
            PlanEmitter(tmp_path).emit(emission)

        assert exc_info.value.output_path.endswith('z.py')
        assert sorted(p.name for p in tmp_path.iterdir()) == ['z.py']
        assert (tmp_path / 'z.py').read_text() == 'old'

    def test_existing_file_replaced_with_overwrite(self, tmp_path):
        (tmp_path / 'crabs.py').write_text('old')
        emission = modularize([FlatArtifact('crabs', 'new')])

        PlanEmitter(tmp_path, overwrite=True).emit(emission)

        assert (tmp_path / 'crabs.py').read_text() == 'new'

    def test_unwritable_output(self, tmp_path):
        """Test that a file in place of a package directory is reported."""
        (tmp_path / 'crabs').write_text('not a directory')
        emission = modularize(CRAB_ARTIFACTS)

        with pytest.raises(OutputError):
            PlanEmitter(tmp_path, overwrite=True).emit(emission)

    def test_emitted_tree_is_importable(self, tmp_path, monkeypatch):
        """Test that every package is reachable under its dotted name."""
        artifacts = [
            FlatArtifact('crabs', 'FERRIS = "ferris"\n'),
            FlatArtifact('crabs.disney.ariel', 'SEBASTIAN = "sebastian"\n'),
            FlatArtifact('crabs.sponge_bob', 'MR_KRABS = "mr krabs"\n'),
        ]
        library = tmp_path / 'crablib'
        PlanEmitter(library).emit(modularize(artifacts))

        monkeypatch.syspath_prepend(str(tmp_path))
        try:
            crablib = importlib.import_module('crablib')

            assert crablib.crabs.FERRIS == 'ferris'
            assert crablib.crabs.disney.ariel.SEBASTIAN == 'sebastian'
            assert crablib.crabs.sponge_bob.MR_KRABS == 'mr krabs'
        finally:
            for name in list(sys.modules):
                if name == 'crablib' or name.startswith('crablib.'):
                    del sys.modules[name]
