import json
import os
import re
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from protomod.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['protomod.yaml', 'protomod.yml', 'protomod.json']

ENV_PREFIX = 'PROTOMOD_'

_ENV_VAR_RE = re.compile(
    r'\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}'
)


class BuildConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)

    source: Path = Field(..., description='Directory containing the .proto files.')

    output: Path = Field(
        Path('out'), description='Output directory for the generated package tree.'
    )

    plugin: str = Field(
        ..., description='Code generator plugin name, as used in --<plugin>_out.'
    )

    plugin_options: list[str] = Field(
        default_factory=list, description='Options passed via --<plugin>_opt.'
    )

    artifact_suffix: str = Field(
        '.py', description='File name suffix of the files the plugin generates.'
    )

    include_paths: list[Path] = Field(
        default_factory=list,
        description='Additional directories added to the protobuf import path.',
    )

    protoc: str = Field('protoc', description='Name or path of the protoc executable.')

    temp_dir: Path | None = Field(
        None, description='Where to create the temporary working directory.'
    )

    file_descriptor_set: Path | None = Field(
        None, description='Optional path to store a FileDescriptorSet at.'
    )

    include_imports: bool = Field(
        True, description='Whether the FileDescriptorSet includes all imports.'
    )

    clean_output: bool = Field(
        True, description='Whether to remove a previous output directory first.'
    )

    overwrite: bool = Field(
        False, description='Whether existing output files may be replaced.'
    )


def _expand_env_vars(value: str) -> str:
    """Expand `${VAR}` and `${VAR:-default}` references in a string."""

    def replace(match: re.Match) -> str:
        default = match.group('default')
        env_value = os.environ.get(match.group('name'))
        if env_value:
            return env_value
        if default is not None:
            return default
        return ''

    return _ENV_VAR_RE.sub(replace, value)


def _expand_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, str):
        return _expand_env_vars(data)
    if isinstance(data, dict):
        return {key: _expand_env_vars_recursive(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars_recursive(item) for item in data]
    return data


def load_yaml(path: str | Path) -> dict:
    import yaml

    return yaml.load(Path(path).read_text(), Loader=yaml.FullLoader)


def load_json(path: str | Path) -> dict:
    return json.loads(Path(path).read_text())


def _load_file(path: str | Path) -> dict:
    if Path(path).suffix == '.json':
        return load_json(path)
    return load_yaml(path) or {}


def validate_config(data: dict, config_path: str | None = None) -> BuildConfig:
    """Validate raw configuration data, expanding environment variables.

    Fields missing from the data are read from PROTOMOD_* environment
    variables before defaults apply.

    Raises:
        ConfigurationError: If the data does not form a valid BuildConfig.
    """
    try:
        return BuildConfig(**_expand_env_vars_recursive(data))
    except ValidationError as e:
        error = e.errors()[0]
        field = '.'.join(str(loc) for loc in error['loc'])
        raise ConfigurationError(
            error['msg'], config_path=config_path, field=field
        ) from e


def load_config_data(path: str | None = None) -> tuple[dict, str | None]:
    """Find and read raw configuration data without validating it.

    Lookup order: the explicit path, then protomod.yaml, protomod.yml or
    protomod.json in the current directory, then `[tool.protomod]` in
    pyproject.toml.

    Returns:
        The raw data and the path it was read from.

    Raises:
        FileNotFoundError: If no configuration file is found.
    """
    if path:
        return _load_file(path), path

    cwd = os.getcwd()

    for filename in DEFAULT_FILENAMES:
        candidate = Path(cwd) / filename
        if candidate.exists():
            return _load_file(candidate), str(candidate)

    pyproject_path = Path(cwd) / 'pyproject.toml'

    if pyproject_path.exists():
        import tomllib

        pyproject = tomllib.loads(pyproject_path.read_text())
        tools = pyproject.get('tool', {})

        if 'protomod' in tools:
            return tools['protomod'], str(pyproject_path)

    raise FileNotFoundError('config not found')


def get_config(path: str | None = None) -> BuildConfig:
    """Load configuration from a file or the environment.

    Files are looked up as in load_config_data; without one, PROTOMOD_*
    environment variables are used. Environment variables also fill in
    fields a file leaves unset.

    Raises:
        FileNotFoundError: If no configuration source is found.
        ConfigurationError: If the configuration is invalid.
    """
    try:
        data, config_path = load_config_data(path)
    except FileNotFoundError:
        if path or not (
            os.environ.get(f'{ENV_PREFIX}SOURCE')
            and os.environ.get(f'{ENV_PREFIX}PLUGIN')
        ):
            raise
        data, config_path = {}, None

    return validate_config(data, config_path=config_path)


def create_default_config() -> dict:
    """Create a starter configuration dictionary.

    The plugin is left unset: it must name a protoc plugin that writes one
    flat `<package><artifact_suffix>` file per Protobuf package. protoc's
    built-in generators write one file per schema instead and do not fit.
    """
    return {
        'source': './proto',
        'output': './out',
        'plugin_options': [],
        'artifact_suffix': '.py',
        'include_paths': [],
    }
