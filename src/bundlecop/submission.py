"""Submission of readings.

Values for a submission can come from many places: options given by the
user, ``BUNDLECOP_*`` environment variables, the project and user config
files, the CI environment, the git repository and built-in defaults. This
module picks the right value for each, checks we have everything we need,
and submits.
"""

import os
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .api import ReadingsApiClient
from .ci import get_ci_info
from .config import (
    PROJECT_CONFIG_FILE,
    as_bool,
    get_config,
    load_project_config,
    read_option,
)
from .models import FileReading, Reading, SubmissionOptions
from .repo import get_repo_info
from .utils.console import _rich_echo, _rich_info, _rich_success


DEFAULT_API_URL = 'https://api.bundlecop.com/api'


class ValidationError(Exception):
    """Raised when a value required for submission is missing."""


ValuePicker = Optional[Tuple[Any, str]]


def read_options_from_env(env: Optional[Mapping[str, str]] = None) -> SubmissionOptions:
    """Read submission options from ``BUNDLECOP_*`` environment variables."""
    parent_commits = read_option('parentCommits', env)
    is_feature_branch = read_option('isFeatureBranch', env)

    return SubmissionOptions(
        project_key=read_option('projectKey', env),
        api_url=read_option('apiUrl', env),
        bundle_set=read_option('bundleSet', env),
        commit=read_option('commit', env),
        commit_message=read_option('commitMessage', env),
        parent_commits=parent_commits.split(',') if parent_commits else None,
        base_branch=read_option('baseBranch', env),
        is_feature_branch=as_bool(is_feature_branch) if is_feature_branch is not None else None,
        branch=read_option('branch', env),
        only_if_env=read_option('onlyIfEnv', env),
    )


def validate_config(values: Mapping[str, Any]):
    """Make sure we have all values required for a submission.

    Raises:
        ValidationError: If a required value is missing.
    """
    if not values.get('api_url'):
        raise ValidationError('The apiUrl option needs to be set to something.')

    if not values.get('project_key'):
        raise ValidationError('The projectKey option needs to be set to something.')

    if not values.get('bundle_set'):
        raise ValidationError('The bundleSet option needs to be set to something.')


def pick_one(values: Sequence[ValuePicker]) -> Tuple[Any, Optional[str]]:
    """Return the first ``(value, source)`` pair that has a value.

    None entries are skipped (they come from ``condition and (value, source)``
    constructs). Empty strings, None, False and empty lists count as unset.
    """
    for check in values:
        if check is None:
            continue

        value, source = check
        if value is None or value is False or value == "":
            continue
        if isinstance(value, (list, tuple)) and len(value) == 0:
            continue

        return value, source
    return None, None


def select_values(strategy: Mapping[str, Sequence[ValuePicker]]) -> Tuple[Dict[str, Any], Dict[str, Optional[str]]]:
    """Apply :func:`pick_one` to every entry of ``strategy``.

    Returns:
        Tuple: The selected values, and the source of every value.
    """
    values = {}
    sources = {}
    for name, pickers in strategy.items():
        values[name], sources[name] = pick_one(pickers)
    return values, sources


def _build_strategy(options: SubmissionOptions,
                    env_options: SubmissionOptions,
                    project_config: Mapping[str, Any],
                    user_config: Mapping[str, Any],
                    ci_info, repo_info) -> Dict[str, List[ValuePicker]]:
    def from_ci(field_name):
        value = getattr(ci_info, field_name)
        return value, f"found in CI env var {ci_info.sources.get(field_name)}"

    repo_source = f"found via {repo_info.system} repo" if repo_info else None

    return {
        'api_url': [
            (options.api_url, 'options'),
            (env_options.api_url, 'environment'),
            (project_config.get('api_url'), PROJECT_CONFIG_FILE),
            (user_config.get('api_url'), 'user config'),
            (DEFAULT_API_URL, 'default'),
        ],
        'project_key': [
            (options.project_key, 'options'),
            (env_options.project_key, 'environment'),
            (project_config.get('project_key'), PROJECT_CONFIG_FILE),
            (user_config.get('project_key'), 'user config'),
        ],
        'bundle_set': [
            (options.bundle_set, 'options'),
            (env_options.bundle_set, 'environment'),
            (project_config.get('bundleset'), PROJECT_CONFIG_FILE),
            (user_config.get('bundleset'), 'user config'),
        ],
        'commit': [
            (options.commit, 'specified on command line'),
            (env_options.commit, 'environment'),
            ci_info and from_ci('commit_id'),
            repo_info and (repo_info.commit_id, repo_source),
        ],
        'commit_message': [
            (options.commit_message, 'options'),
            (env_options.commit_message, 'environment'),
            ci_info and from_ci('commit_message'),
            repo_info and (repo_info.commit_message, repo_source),
        ],
        'branch': [
            (options.branch, 'specified on command line'),
            (env_options.branch, 'environment'),
            ci_info and from_ci('branch'),
            repo_info and (repo_info.branch, repo_source),
        ],
        'parent_commits': [
            (options.parent_commits, 'specified on command line'),
            (env_options.parent_commits, 'environment'),
            repo_info and (repo_info.parent_commit_ids, repo_source),
        ],
        'is_feature_branch': [
            (options.is_feature_branch, 'options'),
            (env_options.is_feature_branch, 'environment'),
            ci_info and (ci_info.event == 'pull_request',
                         f"found in CI env var {ci_info.sources.get('event')}"),
        ],
        'base_branch': [
            (options.base_branch, 'options'),
            (env_options.base_branch, 'environment'),
            ci_info and from_ci('base_branch'),
        ],
    }


def _output_data_point(label: str, value: Any, source: Optional[str]):
    if value is None:
        _rich_echo(f"  {label}: unset", color="yellow")
        return

    if isinstance(value, (list, tuple)):
        value = ", ".join(str(v) for v in value)
    _rich_echo(f"  {label}: {value} ({source or 'not found'})", color="white")


def submit_reading(files: List[FileReading],
                   options: Optional[SubmissionOptions] = None,
                   env: Optional[Mapping[str, str]] = None,
                   project_config: Optional[Mapping[str, Any]] = None,
                   user_config: Optional[Mapping[str, Any]] = None,
                   dry_run: bool = False) -> Optional[Reading]:
    """Collect all values for a reading of ``files``, and submit it.

    Args:
        files (List[FileReading]): The measured files.
        options (SubmissionOptions, optional): Options given explicitly;
            these take precedence over everything else.
        env (Mapping, optional): Environment to read from, defaults to
            ``os.environ``.
        project_config (Mapping, optional): Project config, loaded from
            ``bundlecop.yml`` if not given.
        user_config (Mapping, optional): User config, loaded from the user
            config file if not given.
        dry_run (bool): Validate and show what would be submitted, but do
            not submit.

    Returns:
        Optional[Reading]: The reading, or None if submission was skipped
            because of the only-if-env option.

    Raises:
        ValidationError: If required values are missing.
        ApiError: If the API rejected the reading.
    """
    if env is None:
        env = os.environ
    if options is None:
        options = SubmissionOptions()
    env_options = read_options_from_env(env)

    only_if_env = options.only_if_env or env_options.only_if_env
    if only_if_env and not env.get(only_if_env):
        _rich_info(f"Skipping submission, because environment variable {only_if_env} is not set.",
                   symbol="skip")
        return None

    if project_config is None:
        project_config = load_project_config()
    if user_config is None:
        user_config = get_config()

    ci_info = get_ci_info(env)
    repo_info = get_repo_info()

    values, sources = select_values(
        _build_strategy(options, env_options, project_config, user_config, ci_info, repo_info)
    )

    validate_config(values)

    _rich_info(f"Submitting reading with {len(files)} files:")
    _output_data_point('Commit', values['commit'], sources['commit'])
    _output_data_point('Parent Commits', values['parent_commits'], sources['parent_commits'])
    _output_data_point('Branch', values['branch'], sources['branch'])
    if values['base_branch']:
        _output_data_point('Base Branch', values['base_branch'], sources['base_branch'])
    else:
        _output_data_point('Is Feature Branch', values['is_feature_branch'], sources['is_feature_branch'])

    reading = Reading(
        files=files,
        bundleset=values['bundle_set'],
        commit=values['commit'],
        commit_message=values['commit_message'],
        branch=values['branch'],
        is_feature_branch=values['base_branch'] or values['is_feature_branch'],
        parent_commits=values['parent_commits'],
    )

    if dry_run:
        _rich_info("Dry run, nothing was submitted.")
        return reading

    client = ReadingsApiClient(values['api_url'], values['project_key'])
    client.submit_reading(reading)

    _rich_success("Submitted", symbol="success")
    return reading
