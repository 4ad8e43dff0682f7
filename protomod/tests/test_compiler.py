"""Tests for the protoc boundary and artifact collection."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from protomod.compiler import ProtocCompiler, collect_artifacts
from protomod.config import BuildConfig
from protomod.exceptions import ArtifactError, CompilationError
from protomod.modgen import FlatArtifact
from protomod.tests.fixtures import GENERATED_FILES, write_files


class TestBuildCommand:
    """Tests for ProtocCompiler.build_command."""

    def test_minimal_command(self):
        compiler = ProtocCompiler(plugin='myplugin')

        cmd = compiler.build_command(['a.proto'], 'out')

        assert cmd == ['protoc', '--myplugin_out=out', 'a.proto']

    def test_descriptor_set_includes_imports_by_default(self):
        """Test that the compiler and BuildConfig agree on include_imports."""
        compiler = ProtocCompiler(plugin='myplugin', descriptor_set_out='fds.bin')

        cmd = compiler.build_command(['a.proto'], 'out')

        assert compiler.include_imports is BuildConfig.model_fields[
            'include_imports'
        ].default
        assert cmd[-3:] == [
            '--descriptor_set_out=fds.bin',
            '--include_imports',
            'a.proto',
        ]

    def test_descriptor_set_without_imports(self):
        compiler = ProtocCompiler(
            plugin='myplugin', descriptor_set_out='fds.bin', include_imports=False
        )

        assert '--include_imports' not in compiler.build_command(['a.proto'], 'out')

    def test_full_command(self):
        compiler = ProtocCompiler(
            plugin='myplugin',
            protoc='/usr/bin/protoc',
            plugin_options=['compile_well_known_types', 'file_descriptor_set'],
            include_paths=['vendor', Path('third_party')],
            descriptor_set_out='fds.bin',
            include_imports=True,
        )

        cmd = compiler.build_command(
            ['a.proto', Path('b.proto')], 'out', extra_include_paths=['patched']
        )

        assert cmd == [
            '/usr/bin/protoc',
            '--proto_path=vendor',
            '--proto_path=third_party',
            '--proto_path=patched',
            '--myplugin_out=out',
            '--myplugin_opt=compile_well_known_types',
            '--myplugin_opt=file_descriptor_set',
            '--descriptor_set_out=fds.bin',
            '--include_imports',
            'a.proto',
            'b.proto',
        ]

    def test_extra_include_paths_not_kept(self):
        """Test that extra include paths only apply to a single call."""
        compiler = ProtocCompiler(plugin='myplugin', include_paths=['vendor'])

        compiler.build_command(['a.proto'], 'out', extra_include_paths=['patched'])

        assert compiler.include_paths == [Path('vendor')]


class TestCompile:
    """Tests for ProtocCompiler.compile."""

    def test_no_files(self, tmp_path):
        with pytest.raises(CompilationError, match='No protobuf files'):
            ProtocCompiler(plugin='myplugin').compile([], tmp_path)

    @patch('protomod.compiler.shutil.which', return_value=None)
    def test_missing_protoc(self, mock_which, tmp_path):
        with pytest.raises(CompilationError, match='not found'):
            ProtocCompiler(plugin='myplugin').compile(['a.proto'], tmp_path)

    @patch('protomod.compiler.subprocess.run')
    @patch('protomod.compiler.shutil.which', return_value='/usr/bin/protoc')
    def test_success(self, mock_which, mock_run, tmp_path):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout='', stderr=''
        )
        out_dir = tmp_path / 'code'

        ProtocCompiler(plugin='myplugin').compile(['a.proto'], out_dir)

        assert out_dir.is_dir()
        mock_run.assert_called_once_with(
            ['protoc', f'--myplugin_out={out_dir}', 'a.proto'],
            capture_output=True,
            text=True,
        )

    @patch('protomod.compiler.subprocess.run')
    @patch('protomod.compiler.shutil.which', return_value='/usr/bin/protoc')
    def test_failure_reports_stderr(self, mock_which, mock_run, tmp_path):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[],
            returncode=1,
            stdout='',
            stderr='crabs/Ferris.proto:3:1: Expected ";".\n',
        )

        with pytest.raises(CompilationError) as exc_info:
            ProtocCompiler(plugin='myplugin').compile(['a.proto'], tmp_path)

        error = exc_info.value
        assert 'status 1' in str(error)
        assert 'Expected ";"' in str(error)
        assert error.command[0] == 'protoc'
        assert error.stderr.startswith('crabs/Ferris.proto')

    @patch('protomod.compiler.subprocess.run', side_effect=PermissionError('denied'))
    @patch('protomod.compiler.shutil.which', return_value='/usr/bin/protoc')
    def test_os_error(self, mock_which, mock_run, tmp_path):
        with pytest.raises(CompilationError, match='denied'):
            ProtocCompiler(plugin='myplugin').compile(['a.proto'], tmp_path)

    @patch('protomod.compiler.subprocess.run')
    @patch('protomod.compiler.shutil.which', return_value='/usr/bin/protoc')
    def test_creates_descriptor_set_parent(self, mock_which, mock_run, tmp_path):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout='', stderr=''
        )
        fds = tmp_path / 'descriptors' / 'fds.bin'

        ProtocCompiler(plugin='myplugin', descriptor_set_out=fds).compile(
            ['a.proto'], tmp_path / 'code'
        )

        assert fds.parent.is_dir()


class TestCollectArtifacts:
    """Tests for collect_artifacts."""

    def test_collect(self, tmp_path):
        write_files(tmp_path, GENERATED_FILES)

        artifacts = collect_artifacts(tmp_path)

        assert sorted(artifacts, key=lambda a: a.package) == [
            FlatArtifact('crabs', 'class Ferris:\n    pass\n'),
            FlatArtifact('crabs.disney.ariel', 'class Sebastian:\n    pass\n'),
            FlatArtifact('crabs.sponge_bob', 'class MrKrabs:\n    pass\n'),
        ]

    def test_suffix_filter(self, tmp_path):
        write_files(tmp_path, {'a.b.rs': 'struct B;\n', 'notes.txt': 'ignored'})

        artifacts = collect_artifacts(tmp_path, suffix='.rs')

        assert artifacts == [FlatArtifact('a.b', 'struct B;\n')]

    def test_root_placeholder(self, tmp_path):
        write_files(tmp_path, {'_.py': 'ROOT = 1\n'})

        assert collect_artifacts(tmp_path) == [FlatArtifact('_', 'ROOT = 1\n')]

    def test_preserves_line_endings(self, tmp_path):
        (tmp_path / 'crabs.py').write_bytes(b'a = 1\r\n')

        assert collect_artifacts(tmp_path)[0].content == 'a = 1\r\n'

    def test_empty_directory(self, tmp_path):
        assert collect_artifacts(tmp_path) == []

    def test_unreadable_file(self, tmp_path):
        (tmp_path / 'crabs.py').write_bytes(b'\xff\xfe\x00 not utf-8')

        with pytest.raises(ArtifactError) as exc_info:
            collect_artifacts(tmp_path)

        assert 'crabs.py' in exc_info.value.path
